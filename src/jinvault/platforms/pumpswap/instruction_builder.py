"""
PumpSwap creator fee claim instructions.

A claim is three instructions: make sure the creator's WSOL account exists,
collect the vault into it, then close it so the lamports land as plain SOL.
"""

from typing import Final

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from spl.token.instructions import (
    CloseAccountParams,
    close_account,
    create_idempotent_associated_token_account,
)

from jinvault.core.accounts import anchor_discriminator
from jinvault.core.pubkeys import SOL_MINT, TOKEN_PROGRAM
from jinvault.platforms.pumpswap.address_provider import (
    PumpSwapAddresses,
    PumpSwapAddressProvider,
)

COLLECT_COIN_CREATOR_FEE_DISCRIMINATOR: Final[bytes] = anchor_discriminator(
    "collect_coin_creator_fee"
)


class PumpSwapInstructionBuilder:
    """Builds the PumpSwap claim-and-unwrap sequence."""

    def __init__(self, address_provider: PumpSwapAddressProvider | None = None):
        self.address_provider = address_provider or PumpSwapAddressProvider()

    def build_collect_creator_fee_instruction(self, creator: Pubkey) -> Instruction:
        """Build collect_coin_creator_fee.

        Args:
            creator: Coin creator, signs and receives the fees

        Returns:
            Collect instruction
        """
        accounts_info = self.address_provider.get_collect_fee_accounts(creator)

        accounts = [
            AccountMeta(pubkey=accounts_info["quote_mint"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["quote_token_program"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["coin_creator"], is_signer=True, is_writable=True),
            AccountMeta(pubkey=accounts_info["coin_creator_vault_authority"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["coin_creator_vault_ata"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["coin_creator_token_account"], is_signer=False, is_writable=True),
            AccountMeta(pubkey=accounts_info["event_authority"], is_signer=False, is_writable=False),
            AccountMeta(pubkey=accounts_info["program"], is_signer=False, is_writable=False),
        ]

        return Instruction(
            PumpSwapAddresses.PROGRAM, COLLECT_COIN_CREATOR_FEE_DISCRIMINATOR, accounts
        )

    def build_claim_instructions(self, creator: Pubkey) -> list[Instruction]:
        """Build the full claim sequence: create WSOL account, collect, close.

        Args:
            creator: Coin creator wallet

        Returns:
            Instructions in execution order
        """
        creator_wsol_account = self.address_provider.get_collect_fee_accounts(creator)[
            "coin_creator_token_account"
        ]

        create_ata_ix = create_idempotent_associated_token_account(
            creator,  # payer
            creator,  # owner
            SOL_MINT,  # mint
            TOKEN_PROGRAM,
        )

        collect_ix = self.build_collect_creator_fee_instruction(creator)

        # Closing a WSOL account returns its lamports to the destination
        close_ix = close_account(
            CloseAccountParams(
                account=creator_wsol_account,
                dest=creator,
                owner=creator,
                program_id=TOKEN_PROGRAM,
            )
        )

        return [create_ata_ix, collect_ix, close_ix]
