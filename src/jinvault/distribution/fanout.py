"""
Proportional token fan-out to holders.

Holders are paid one transaction at a time. A failed transfer is logged and
skipped; it never stops the remaining holders from being paid.
"""

from collections.abc import Sequence

from solders.pubkey import Pubkey
from spl.token.instructions import (
    TransferCheckedParams,
    create_idempotent_associated_token_account,
    get_associated_token_address,
    transfer_checked,
)

from jinvault.core.client import SolanaClient
from jinvault.core.pubkeys import TOKEN_PROGRAM
from jinvault.core.wallet import Wallet
from jinvault.interfaces.core import FanOutResult, HolderInfo
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)

TRANSFER_COMPUTE_UNITS = 100_000
TRANSFER_PRIORITY_FEE = 25_000


def compute_shares(holders: Sequence[HolderInfo], total_amount: int) -> list[int]:
    """Split `total_amount` raw units by each holder's share of total percentage.

    Shares are floored, so their sum never exceeds `total_amount` and falls
    short of it by less than one unit per holder.
    """
    total_percentage = sum(holder.percentage for holder in holders)
    if total_percentage <= 0 or total_amount <= 0:
        return [0] * len(holders)

    shares = []
    remaining = total_amount
    for holder in holders:
        share = min(int(total_amount * holder.percentage / total_percentage), remaining)
        shares.append(share)
        remaining -= share
    return shares


class TokenDistributor:
    """Sends one SPL token from the distributor wallet to many holders."""

    def __init__(self, client: SolanaClient, wallet: Wallet, mint: Pubkey):
        """
        Args:
            client: Solana RPC client
            wallet: Distributor wallet, pays for transfers and new accounts
            mint: Token being distributed
        """
        self.client = client
        self.wallet = wallet
        self.mint = mint

    async def get_balance(self) -> int:
        """Raw units of the distributed token held by the wallet, 0 if it has no account."""
        mint_info = await self.client.get_mint_info(self.mint)
        token_program = (mint_info.token_program if mint_info else None) or TOKEN_PROGRAM
        source = self.wallet.get_associated_token_address(self.mint, token_program)
        return await self.client.get_token_account_balance(source)

    async def distribute_proportionally(
        self, holders: Sequence[HolderInfo], total_amount: int
    ) -> FanOutResult:
        """Send each holder its proportional share of `total_amount` raw units.

        Returns:
            FanOutResult with the total actually sent and every signature obtained
        """
        if not holders or total_amount <= 0:
            return FanOutResult(success=False, error_message="Invalid parameters")

        try:
            mint_info = await self.client.get_mint_info(self.mint)
            if mint_info is None:
                return FanOutResult(success=False, error_message=f"Mint {self.mint} not found")
            token_program = mint_info.token_program or TOKEN_PROGRAM

            source = self.wallet.get_associated_token_address(self.mint, token_program)
            balance = await self.client.get_token_account_balance(source)
            if balance < total_amount:
                logger.warning(f"Insufficient balance to distribute: {balance} < {total_amount}")
                return FanOutResult(success=False, error_message="Insufficient reward balance")
        except Exception as e:
            logger.exception("Distribution setup failed")
            return FanOutResult(success=False, error_message=str(e))

        logger.info(f"Distributing {total_amount} units of {self.mint} to {len(holders)} holders...")

        result = FanOutResult(success=True)
        for holder, share in zip(holders, compute_shares(holders, total_amount)):
            if share <= 0:
                continue
            try:
                signature = await self._transfer(
                    source, holder.address, share, mint_info.decimals, token_program
                )
            except Exception as e:
                logger.error(f"Failed to send to {holder.address}: {e!s}")
                continue

            result.signatures.append(signature)
            result.distributed += share
            result.recipients += 1
            logger.info(f"Sent {share} units to {str(holder.address)[:8]}...")

        logger.info(
            f"Distribution complete: {result.distributed} units to {result.recipients} holders"
        )
        return result

    async def _transfer(
        self,
        source: Pubkey,
        owner: Pubkey,
        amount: int,
        decimals: int,
        token_program: Pubkey,
    ) -> str:
        destination = get_associated_token_address(owner, self.mint, token_program)
        instructions = []

        if await self.client.get_account_info(destination) is None:
            instructions.append(
                create_idempotent_associated_token_account(
                    self.wallet.pubkey,  # payer
                    owner,
                    self.mint,
                    token_program,
                )
            )

        instructions.append(
            transfer_checked(
                TransferCheckedParams(
                    program_id=token_program,
                    source=source,
                    mint=self.mint,
                    dest=destination,
                    owner=self.wallet.pubkey,
                    amount=amount,
                    decimals=decimals,
                )
            )
        )

        return await self.client.build_and_send_transaction(
            instructions,
            self.wallet.keypair,
            compute_unit_limit=TRANSFER_COMPUTE_UNITS,
            priority_fee=TRANSFER_PRIORITY_FEE,
        )
