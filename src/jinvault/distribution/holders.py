"""
Token holder tiering.

Works from the chain's ranked largest-accounts query, so the result is a
top-N snapshot rather than a full census.
"""

from collections.abc import Iterable

from solders.pubkey import Pubkey

from jinvault.core.client import SolanaClient
from jinvault.interfaces.core import HolderInfo, HolderTiers
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)


def partition_holders(
    holders: Iterable[HolderInfo], major_min_pct: float, medium_min_pct: float
) -> HolderTiers:
    """Split holders into major and medium tiers.

    A holder exactly on a threshold goes to the higher tier. Holders below
    `medium_min_pct` are dropped.
    """
    tiers = HolderTiers()
    for holder in holders:
        if holder.percentage >= major_min_pct:
            tiers.major_holders.append(holder)
        elif holder.percentage >= medium_min_pct:
            tiers.medium_holders.append(holder)
    return tiers


class HolderClassifier:
    """Resolves the largest token accounts of a mint to wallets and tiers them."""

    def __init__(
        self,
        client: SolanaClient,
        mint: Pubkey,
        excluded_owners: Iterable[Pubkey] = (),
        limit: int | None = None,
    ):
        """
        Args:
            client: Solana RPC client
            mint: Token to classify holders of
            excluded_owners: Wallets never rewarded, e.g. the distributor and the bonding curve
            limit: Only consider this many of the largest accounts
        """
        self.client = client
        self.mint = mint
        self.excluded_owners = set(excluded_owners)
        self.limit = limit

    async def get_holders(self, min_percentage: float = 0.0) -> list[HolderInfo]:
        """Holders at or above `min_percentage` of supply, largest first.

        Token accounts with the same owner are merged into a single holder
        before the threshold is applied.
        """
        mint_info = await self.client.get_mint_info(self.mint)
        if mint_info is None or mint_info.supply == 0:
            logger.warning(f"Mint {self.mint} not found or has zero supply")
            return []

        largest_accounts = await self.client.get_token_largest_accounts(self.mint)
        if self.limit is not None:
            largest_accounts = largest_accounts[: self.limit]
        scale = 10**mint_info.decimals
        total_supply = mint_info.supply / scale

        amounts_by_owner: dict[Pubkey, int] = {}
        for token_account, amount in largest_accounts:
            owner = await self._resolve_owner(token_account)
            if owner is None:
                continue
            if owner in self.excluded_owners:
                logger.debug(f"Skipping excluded holder {owner}")
                continue
            amounts_by_owner[owner] = amounts_by_owner.get(owner, 0) + amount

        holders: list[HolderInfo] = []
        ranked = sorted(amounts_by_owner.items(), key=lambda item: item[1], reverse=True)
        for owner, amount in ranked:
            balance = amount / scale
            percentage = balance / total_supply * 100
            if percentage < min_percentage:
                continue
            holders.append(HolderInfo(address=owner, balance=balance, percentage=percentage))

        return holders

    async def classify(self, major_min_pct: float, medium_min_pct: float) -> HolderTiers:
        """Fetch holders and partition them into major and medium tiers.

        Args:
            major_min_pct: Minimum percentage of supply for the major tier
            medium_min_pct: Minimum percentage of supply for the medium tier

        Returns:
            HolderTiers, empty on RPC failure
        """
        try:
            holders = await self.get_holders(medium_min_pct)
        except Exception:
            logger.exception("Error fetching token holders by tier")
            return HolderTiers()

        tiers = partition_holders(holders, major_min_pct, medium_min_pct)
        logger.info(
            f"Found {len(tiers.major_holders)} major holders (>={major_min_pct}%) and "
            f"{len(tiers.medium_holders)} medium holders ({medium_min_pct}%-{major_min_pct}%)"
        )
        return tiers

    async def _resolve_owner(self, token_account: Pubkey) -> Pubkey | None:
        try:
            info = await self.client.get_token_account(token_account)
        except Exception as e:
            logger.warning(f"Could not resolve owner of {token_account}: {e!s}")
            return None

        if info is None:
            logger.warning(f"Token account {token_account} not found, skipping")
            return None
        return info.owner
