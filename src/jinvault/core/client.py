"""
Solana client abstraction for blockchain operations.

Submission here is single-attempt: callers own their retry policy.
"""

import json
from typing import Any

import aiohttp
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import (
    RPCException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solana.rpc.types import TxOpts
from solders.account import Account
from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction

from jinvault.core.accounts import (
    MintInfo,
    TokenAccountInfo,
    decode_mint,
    decode_token_account,
)
from jinvault.core.errors import ConfirmationTimeoutError, TransactionFailedError
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)


class SolanaClient:
    """Abstraction for Solana RPC client operations."""

    def __init__(self, rpc_endpoint: str, commitment: Commitment = Confirmed):
        """Initialize Solana client with RPC endpoint.

        Args:
            rpc_endpoint: URL of the Solana RPC endpoint
            commitment: Commitment level used for reads and confirmations
        """
        self.rpc_endpoint = rpc_endpoint
        self.commitment = commitment
        self._client: AsyncClient | None = None

    async def get_client(self) -> AsyncClient:
        """Get or create the AsyncClient instance.

        Returns:
            AsyncClient instance
        """
        if self._client is None:
            self._client = AsyncClient(self.rpc_endpoint, commitment=self.commitment)
        return self._client

    async def close(self):
        """Close the client connection."""
        if self._client:
            await self._client.close()
            self._client = None

    async def get_balance(self, pubkey: Pubkey) -> int:
        """Get the native balance of an account in lamports."""
        client = await self.get_client()
        response = await client.get_balance(pubkey, commitment=self.commitment)
        return response.value

    async def get_account_info(self, pubkey: Pubkey) -> Account | None:
        """Get account info from the blockchain.

        Args:
            pubkey: Public key of the account

        Returns:
            Account, or None if the account does not exist
        """
        client = await self.get_client()
        response = await client.get_account_info(pubkey, encoding="base64")
        return response.value

    async def get_minimum_balance_for_rent_exemption(self, size: int = 0) -> int:
        """Get the rent-exempt minimum in lamports for an account of `size` bytes."""
        client = await self.get_client()
        response = await client.get_minimum_balance_for_rent_exemption(size)
        return response.value

    async def get_mint_info(self, mint: Pubkey) -> MintInfo | None:
        """Fetch and decode a mint account.

        The owning program (Token or Token-2022) is recorded on the result.
        """
        account = await self.get_account_info(mint)
        if account is None:
            return None
        return decode_mint(bytes(account.data), token_program=account.owner)

    async def get_token_account(self, token_account: Pubkey) -> TokenAccountInfo | None:
        """Fetch and decode a token account, None if it does not exist."""
        account = await self.get_account_info(token_account)
        if account is None:
            return None
        return decode_token_account(bytes(account.data))

    async def get_token_account_balance(self, token_account: Pubkey) -> int:
        """Get token balance for an account.

        Args:
            token_account: Token account address

        Returns:
            Token balance as integer, 0 when the account does not exist
        """
        info = await self.get_token_account(token_account)
        return info.amount if info else 0

    async def get_token_largest_accounts(self, mint: Pubkey) -> list[tuple[Pubkey, int]]:
        """Get the largest token accounts of a mint.

        Returns:
            List of (token account address, raw amount), largest first
        """
        client = await self.get_client()
        response = await client.get_token_largest_accounts(
            mint, commitment=self.commitment
        )
        return [(item.address, int(item.amount.amount)) for item in response.value]

    async def get_latest_blockhash(self) -> Hash:
        """Get the latest blockhash.

        Returns:
            Recent blockhash
        """
        client = await self.get_client()
        response = await client.get_latest_blockhash(commitment=self.commitment)
        return response.value.blockhash

    async def build_transaction(
        self,
        instructions: list[Instruction],
        signer_keypair: Keypair,
        compute_unit_limit: int | None = None,
        priority_fee: int | None = None,
    ) -> Transaction:
        """Build and sign a legacy transaction.

        Args:
            instructions: Instructions to include
            signer_keypair: Fee payer and only signer
            compute_unit_limit: Optional compute unit limit
            priority_fee: Optional priority fee in microlamports per compute unit

        Returns:
            Signed transaction
        """
        budget_instructions = []
        if compute_unit_limit is not None:
            budget_instructions.append(set_compute_unit_limit(compute_unit_limit))
        if priority_fee is not None:
            budget_instructions.append(set_compute_unit_price(priority_fee))

        recent_blockhash = await self.get_latest_blockhash()
        message = Message(budget_instructions + instructions, signer_keypair.pubkey())
        return Transaction([signer_keypair], message, recent_blockhash)

    async def send_and_confirm(
        self,
        transaction: Transaction | VersionedTransaction,
        skip_preflight: bool = False,
    ) -> str:
        """Submit a signed transaction once and wait for confirmation.

        Args:
            transaction: Signed transaction
            skip_preflight: Whether to skip preflight simulation

        Returns:
            Transaction signature

        Raises:
            TransactionFailedError: If preflight or execution fails
            ConfirmationTimeoutError: If confirmation does not arrive in time
        """
        client = await self.get_client()
        tx_opts = TxOpts(skip_preflight=skip_preflight, preflight_commitment=self.commitment)

        try:
            response = await client.send_raw_transaction(bytes(transaction), tx_opts)
        except RPCException as e:
            raise TransactionFailedError(
                f"Transaction rejected: {e!s}", logs=self._extract_logs(e)
            ) from e

        signature = response.value
        await self.confirm_transaction(signature)
        return str(signature)

    async def build_and_send_transaction(
        self,
        instructions: list[Instruction],
        signer_keypair: Keypair,
        compute_unit_limit: int | None = None,
        priority_fee: int | None = None,
        skip_preflight: bool = False,
    ) -> str:
        """Build, sign, submit and confirm a transaction in one attempt.

        Returns:
            Transaction signature
        """
        logger.info(
            f"Priority fee in microlamports: {priority_fee if priority_fee else 0}"
        )
        transaction = await self.build_transaction(
            instructions, signer_keypair, compute_unit_limit, priority_fee
        )
        return await self.send_and_confirm(transaction, skip_preflight=skip_preflight)

    async def confirm_transaction(self, signature: Signature | str) -> None:
        """Wait for transaction confirmation.

        Args:
            signature: Transaction signature

        Raises:
            TransactionFailedError: If the transaction landed with an error
            ConfirmationTimeoutError: If the transaction was not confirmed
        """
        if isinstance(signature, str):
            signature = Signature.from_string(signature)

        client = await self.get_client()
        try:
            response = await client.confirm_transaction(
                signature, commitment=self.commitment, sleep_seconds=1
            )
        except (UnconfirmedTxError, TransactionExpiredBlockheightExceededError) as e:
            raise ConfirmationTimeoutError(str(signature), str(e)) from e

        statuses = response.value
        status = statuses[0] if statuses else None
        if status is not None and status.err is not None:
            raise TransactionFailedError(f"Transaction {signature} failed: {status.err}")

    async def post_rpc(self, body: dict[str, Any]) -> dict[str, Any] | None:
        """
        Send a raw RPC request to the Solana node.

        Args:
            body: JSON-RPC request body.

        Returns:
            Optional[Dict[str, Any]]: Parsed JSON response, or None if the request fails.
        """
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.rpc_endpoint,
                    json=body,
                    timeout=aiohttp.ClientTimeout(10),  # 10-second timeout
                ) as response:
                    response.raise_for_status()
                    return await response.json()
        except aiohttp.ClientError as e:
            logger.error(f"RPC request failed: {e!s}", exc_info=True)
            return None
        except json.JSONDecodeError as e:
            logger.error(f"Failed to decode RPC response: {e!s}", exc_info=True)
            return None

    @staticmethod
    def _extract_logs(error: RPCException) -> list[str]:
        """Pull program logs out of a preflight failure, if present."""
        payload = error.args[0] if error.args else None
        data = getattr(payload, "data", None)
        logs = getattr(data, "logs", None)
        return list(logs) if logs else []
