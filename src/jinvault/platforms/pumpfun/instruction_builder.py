"""
Pump.fun instruction encoding.

Each instruction is an 8-byte discriminator followed by little-endian
arguments. Account order and flags are fixed by the program.
"""

import struct
from typing import Final

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from jinvault.core.pubkeys import TOKEN_2022_PROGRAM
from jinvault.platforms.pumpfun.address_provider import (
    PumpFunAddresses,
    PumpFunAddressProvider,
)

BUY_DISCRIMINATOR: Final[bytes] = bytes([102, 6, 61, 18, 1, 218, 235, 234])
SELL_DISCRIMINATOR: Final[bytes] = bytes([51, 230, 133, 164, 1, 127, 131, 173])
COLLECT_CREATOR_FEE_DISCRIMINATOR: Final[bytes] = bytes(
    [20, 22, 86, 123, 198, 28, 219, 132]
)

# OptionBool: 0 = None, 1 = Some(false), 2 = Some(true)
TRACK_VOLUME_NONE: Final[int] = 0


class PumpFunInstructionBuilder:
    """Builds buy, sell and creator fee instructions for pump.fun."""

    def __init__(self, address_provider: PumpFunAddressProvider | None = None):
        self.address_provider = address_provider or PumpFunAddressProvider()

    def build_buy_instruction(
        self,
        mint: Pubkey,
        user: Pubkey,
        creator: Pubkey,
        token_amount: int,
        max_sol_cost: int,
        token_program: Pubkey = TOKEN_2022_PROGRAM,
    ) -> Instruction:
        """Build a buy instruction.

        The program creates the user's token account when it is missing.

        Args:
            mint: Token mint address
            user: Buyer, signs and pays
            creator: Creator recorded on the bonding curve
            token_amount: Tokens to receive (raw units)
            max_sol_cost: Upper bound on lamports spent, the slippage guard
            token_program: Token program owning the mint

        Returns:
            Buy instruction (25 bytes of data)
        """
        accounts_info = self.address_provider.get_buy_instruction_accounts(
            mint, user, creator, token_program
        )

        accounts = [
            AccountMeta(pubkey=accounts_info["global"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["fee"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["mint"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["bonding_curve"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["associated_bonding_curve"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["user_token_account"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["user"], is_signer=True, is_writable=True),
            AccountMeta(pubkey=accounts_info["system_program"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["token_program"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["creator_vault"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["event_authority"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["program"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["global_volume_accumulator"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["user_volume_accumulator"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["fee_config"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["fee_program"], is_signer=False, is_writable=False),
        ]

        data = (
            BUY_DISCRIMINATOR
            + struct.pack("<Q", token_amount)
            + struct.pack("<Q", max_sol_cost)
            + struct.pack("<B", TRACK_VOLUME_NONE)
        )

        return Instruction(PumpFunAddresses.PROGRAM, data, accounts)

    def build_sell_instruction(
        self,
        mint: Pubkey,
        user: Pubkey,
        token_amount: int,
        min_sol_output: int,
        token_program: Pubkey = TOKEN_2022_PROGRAM,
    ) -> Instruction:
        """Build a sell instruction.

        Args:
            mint: Token mint address
            user: Seller, signs and receives SOL
            token_amount: Tokens to sell (raw units)
            min_sol_output: Lamports floor, the slippage guard
            token_program: Token program owning the mint

        Returns:
            Sell instruction (24 bytes of data)
        """
        accounts_info = self.address_provider.get_sell_instruction_accounts(
            mint, user, token_program
        )

        accounts = [
            AccountMeta(pubkey=accounts_info["global"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["fee"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["mint"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["bonding_curve"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["associated_bonding_curve"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["user_token_account"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["user"], is_signer=True, is_writable=True),
            AccountMeta(pubkey=accounts_info["system_program"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["token_program"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["event_authority"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["program"], is_signer=False, is_writable=False),
        ]

        data = (
            SELL_DISCRIMINATOR
            + struct.pack("<Q", token_amount)
            + struct.pack("<Q", min_sol_output)
        )

        return Instruction(PumpFunAddresses.PROGRAM, data, accounts)

    def build_collect_creator_fee_instruction(self, creator: Pubkey) -> Instruction:
        """Build the instruction that moves the creator vault balance to `creator`."""
        accounts_info = self.address_provider.get_claim_instruction_accounts(creator)

        accounts = [
            AccountMeta(pubkey=accounts_info["creator"], is_signer=True, is_writable=True),
            AccountMeta(pubkey=accounts_info["creator_vault"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["system_program"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["event_authority"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["program"], is_signer=False, is_writable=False),
        ]

        return Instruction(
            PumpFunAddresses.PROGRAM, COLLECT_CREATOR_FEE_DISCRIMINATOR, accounts
        )

    def get_required_accounts_for_buy(
        self, mint: Pubkey, user: Pubkey, creator: Pubkey
    ) -> list[Pubkey]:
        """Writable accounts of a buy, used for priority fee estimation."""
        accounts_info = self.address_provider.get_buy_instruction_accounts(
            mint, user, creator
        )
        return [
            accounts_info["bonding_curve"],
            accounts_info["associated_bonding_curve"],
            accounts_info["fee"],
            accounts_info["creator_vault"],
        ]

    def get_required_accounts_for_sell(self, mint: Pubkey, user: Pubkey) -> list[Pubkey]:
        """Writable accounts of a sell, used for priority fee estimation."""
        accounts_info = self.address_provider.get_sell_instruction_accounts(mint, user)
        return [
            accounts_info["bonding_curve"],
            accounts_info["associated_bonding_curve"],
            accounts_info["fee"],
        ]
