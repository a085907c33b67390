"""
Jupiter aggregator HTTP client.

Quotes and swap transactions come from the public Jupiter API; the swap
endpoint returns an unsigned versioned transaction encoded as base64.
"""

import base64
from typing import Any

import aiohttp
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from jinvault.core.errors import AggregatorError
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://public.jupiterapi.com"
DEFAULT_MAX_PRIORITY_LAMPORTS = 1_000_000


class JupiterClient:
    """Minimal client for the Jupiter quote and swap endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_priority_lamports: int = DEFAULT_MAX_PRIORITY_LAMPORTS,
    ):
        """
        Args:
            base_url: API root, without a trailing slash
            timeout: Total request timeout in seconds
            max_priority_lamports: Cap on the priority fee Jupiter may add
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_priority_lamports = max_priority_lamports

    async def get_quote(
        self,
        input_mint: Pubkey,
        output_mint: Pubkey,
        amount: int,
        slippage_bps: int,
    ) -> dict[str, Any]:
        """Request a swap quote.

        Args:
            input_mint: Mint being sold
            output_mint: Mint being bought
            amount: Input amount in raw units
            slippage_bps: Allowed slippage in basis points

        Returns:
            Quote response, passed back verbatim to `get_swap_transaction`

        Raises:
            AggregatorError: On HTTP failure or a quote without outAmount
        """
        params = {
            "inputMint": str(input_mint),
            "outputMint": str(output_mint),
            "amount": str(amount),
            "slippageBps": str(slippage_bps),
        }
        quote = await self._request("GET", "/quote", params=params)

        if "outAmount" not in quote:
            raise AggregatorError(f"Jupiter quote missing outAmount: {quote}")

        logger.info(
            f"Jupiter quote: {amount} {input_mint} -> {quote['outAmount']} {output_mint}"
        )
        return quote

    async def get_swap_transaction(
        self,
        user: Pubkey,
        quote: dict[str, Any],
        dynamic_slippage: dict[str, int] | None = None,
    ) -> VersionedTransaction:
        """Have Jupiter build the swap transaction for a quote.

        Args:
            user: Wallet that will sign and pay
            quote: Response from `get_quote`
            dynamic_slippage: Optional {"minBps": .., "maxBps": ..} bounds

        Returns:
            Unsigned versioned transaction

        Raises:
            AggregatorError: On HTTP failure or an undecodable transaction
        """
        body: dict[str, Any] = {
            "userPublicKey": str(user),
            "quoteResponse": quote,
            "wrapAndUnwrapSol": True,
            "prioritizationFeeLamports": {
                "priorityLevelWithMaxLamports": {
                    "maxLamports": self.max_priority_lamports,
                    "priorityLevel": "high",
                }
            },
        }
        if dynamic_slippage:
            body["dynamicSlippage"] = dynamic_slippage

        response = await self._request("POST", "/swap", json=body)

        encoded = response.get("swapTransaction")
        if not encoded:
            raise AggregatorError(f"Jupiter swap response missing swapTransaction: {response}")

        try:
            return VersionedTransaction.from_bytes(base64.b64decode(encoded))
        except Exception as e:
            raise AggregatorError(f"Failed to decode Jupiter swap transaction: {e!s}") from e

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(method, url, **kwargs) as response:
                    if response.status != 200:
                        text = await response.text()
                        raise AggregatorError(
                            f"Jupiter {path.lstrip('/')} failed: HTTP {response.status} {text[:200]}"
                        )
                    return await response.json()
        except aiohttp.ClientError as e:
            raise AggregatorError(f"Jupiter {path.lstrip('/')} request failed: {e!s}") from e
