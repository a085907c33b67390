import statistics

from solders.pubkey import Pubkey

from jinvault.core.client import SolanaClient
from jinvault.core.priority_fee import PriorityFeePlugin
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)


class DynamicPriorityFee(PriorityFeePlugin):
    """Dynamic priority fee plugin using getRecentPrioritizationFees."""

    def __init__(self, client: SolanaClient):
        """
        Initialize the dynamic fee plugin.

        Args:
            client: Solana RPC client for network requests.
        """
        self.client = client

    async def get_priority_fee(
        self, accounts: list[Pubkey] | None = None
    ) -> int | None:
        """
        Fetch the recent priority fee using getRecentPrioritizationFees.

        Args:
            accounts: Writable accounts the transaction will lock.

        Returns:
            Optional[int]: 70th percentile priority fee in microlamports, or None if the request fails.
        """
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getRecentPrioritizationFees",
            "params": [[str(account) for account in accounts]] if accounts else [],
        }

        response = await self.client.post_rpc(body)
        if not response or "result" not in response:
            logger.error("Failed to fetch recent prioritization fees: invalid response")
            return None

        fees = [fee["prioritizationFee"] for fee in response["result"]]
        if len(fees) < 2:
            logger.warning("Not enough prioritization fee samples in the response")
            return fees[0] if fees else None

        # 70th percentile: higher than 70% of recent fees on these accounts
        return int(statistics.quantiles(fees, n=10)[-3])
