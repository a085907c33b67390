"""
Distribution cycle: claim fees, buy the reward asset for each holder tier,
fan it out, then buy back the protocol token.

Tiers run one after the other because every leg signs with the same wallet.
A cycle is never retried here; the caller decides whether to run it again.
"""

import asyncio

from solders.pubkey import Pubkey

from jinvault.core.client import SolanaClient
from jinvault.core.pubkeys import LAMPORTS_PER_SOL, SOL_MINT
from jinvault.core.wallet import Wallet
from jinvault.distribution.fanout import TokenDistributor
from jinvault.distribution.fee_claimer import FeeClaimer
from jinvault.distribution.holders import HolderClassifier
from jinvault.interfaces.core import (
    DistributionConfig,
    DistributionResult,
    HolderInfo,
    SwapDirection,
)
from jinvault.trading.router import SwapRouter
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)

ALREADY_RUNNING = "Distribution already in progress"
NO_FEES = "No fees to claim"
FEES_OFFSET = "Fees collected were offset by transaction costs. No distribution performed."
NO_HOLDERS = "No qualifying holders found"

REWARD_DYNAMIC_SLIPPAGE = {"minBps": 50, "maxBps": 300}


class DistributionOrchestrator:
    """Runs one distribution cycle at a time."""

    def __init__(
        self,
        client: SolanaClient,
        wallet: Wallet,
        fee_claimer: FeeClaimer,
        classifier: HolderClassifier,
        router: SwapRouter,
        distributor: TokenDistributor,
        reward_mint: Pubkey,
        reward_slippage_bps: int = 100,
    ):
        """
        Args:
            client: Solana RPC client, used for balance reads
            wallet: Distributor wallet
            fee_claimer: Creator fee claimer
            classifier: Holder tiering
            router: Swap router for reward purchases and the buyback
            distributor: Fan-out of the reward asset
            reward_mint: Asset bought for holders
            reward_slippage_bps: Slippage allowed when buying the reward asset
        """
        self.client = client
        self.wallet = wallet
        self.fee_claimer = fee_claimer
        self.classifier = classifier
        self.router = router
        self.distributor = distributor
        self.reward_mint = reward_mint
        self.reward_slippage_bps = reward_slippage_bps
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def execute(self, config: DistributionConfig) -> DistributionResult:
        """Run a full cycle.

        A call made while another cycle is in flight fails immediately
        without touching the chain.
        """
        if self._lock.locked():
            logger.warning("Distribution requested while another cycle is running")
            return DistributionResult(success=False, error=ALREADY_RUNNING)

        signatures: list[str] = []
        async with self._lock:
            try:
                return await self._run(config, signatures)
            except Exception as e:
                logger.exception("Distribution cycle aborted")
                return DistributionResult(success=False, signatures=signatures, error=str(e))

    async def _run(
        self, config: DistributionConfig, signatures: list[str]
    ) -> DistributionResult:
        config_error = config.validate()
        if config_error:
            logger.error(config_error)
            return DistributionResult(success=False, error=config_error)

        balance_before = await self.client.get_balance(self.wallet.pubkey)
        logger.info(f"Wallet balance before claim: {balance_before / LAMPORTS_PER_SOL} SOL")

        claim = await self.fee_claimer.claim_fees()
        if claim.signature:
            signatures.append(claim.signature)

        if not claim.success or claim.amount == 0:
            return DistributionResult(
                success=False,
                signatures=signatures,
                error=claim.error_message or NO_FEES,
            )

        balance_after = await self.client.get_balance(self.wallet.pubkey)
        total_fees = balance_after - balance_before
        logger.info(
            f"Actual fees received: {total_fees / LAMPORTS_PER_SOL} SOL "
            f"(vault reported: {claim.amount / LAMPORTS_PER_SOL} SOL)"
        )

        if total_fees <= 0:
            logger.warning("No positive fees received after transaction costs")
            return DistributionResult(success=False, signatures=signatures, error=FEES_OFFSET)

        major_portion = int(total_fees * config.major_holders_percentage / 100)
        medium_portion = int(total_fees * config.medium_holders_percentage / 100)
        buyback_portion = int(total_fees * config.buyback_percentage / 100)

        logger.info(
            f"Distribution: {major_portion} lamports ({config.major_holders_percentage}%) major, "
            f"{medium_portion} lamports ({config.medium_holders_percentage}%) medium, "
            f"{buyback_portion} lamports ({config.buyback_percentage}%) buyback"
        )

        tiers = await self.classifier.classify(
            config.major_min_percentage, config.medium_min_percentage
        )

        result = DistributionResult(
            success=False,
            total_fees_claimed=total_fees,
            major_holders=len(tiers.major_holders),
            medium_holders=len(tiers.medium_holders),
            signatures=signatures,
        )

        if tiers.is_empty:
            result.error = NO_HOLDERS
            return result

        failed_legs = []

        if tiers.major_holders and major_portion > 0:
            purchased, distributed = await self._reward_tier(
                "major", tiers.major_holders, major_portion, signatures
            )
            if purchased is None:
                failed_legs.append("major holders")
            else:
                result.gold_purchased += purchased
                result.gold_distributed = distributed

        if tiers.medium_holders and medium_portion > 0:
            purchased, distributed = await self._reward_tier(
                "medium", tiers.medium_holders, medium_portion, signatures
            )
            if purchased is None:
                failed_legs.append("medium holders")
            else:
                result.gold_purchased += purchased
                result.gold_for_medium_holders = distributed

        if buyback_portion > 0:
            buyback = await self.router.quote_and_swap(SwapDirection.BUY, buyback_portion)
            if buyback.signature:
                signatures.append(buyback.signature)
            if buyback.success:
                result.token_buyback = buyback.amount_out
            else:
                logger.error(f"Buyback failed: {buyback.error_message}")

        if failed_legs:
            legs = ", ".join(failed_legs)
            logger.error(f"Distribution failed for: {legs}")
            result.error = f"Distribution failed for: {legs}. Fees may remain in wallet for retry."
            return result

        result.success = True
        return result

    async def _reward_tier(
        self,
        tier: str,
        holders: list[HolderInfo],
        lamports: int,
        signatures: list[str],
    ) -> tuple[int | None, int]:
        """Buy the reward asset with `lamports` and fan it out to `holders`.

        Only what actually landed in the wallet is fanned out: the quoted
        output is capped by the observed balance change.

        Returns:
            (amount received or None if the purchase failed, amount distributed)
        """
        balance_before = await self.distributor.get_balance()
        swap = await self.router.swap_via_aggregator(
            SOL_MINT,
            self.reward_mint,
            lamports,
            self.reward_slippage_bps,
            dynamic_slippage=REWARD_DYNAMIC_SLIPPAGE,
        )
        if swap.signature:
            signatures.append(swap.signature)

        if not swap.success:
            logger.error(f"{tier.capitalize()} holders swap failed: {swap.error_message}")
            return None, 0

        balance_after = await self.distributor.get_balance()
        received = min(swap.amount_out, balance_after - balance_before)
        if received < swap.amount_out:
            logger.warning(
                f"{tier.capitalize()} holders swap delivered {balance_after - balance_before}, "
                f"quoted {swap.amount_out}"
            )
        if received <= 0:
            logger.error(f"{tier.capitalize()} holders swap delivered nothing to distribute")
            return None, 0

        fan_out = await self.distributor.distribute_proportionally(holders, received)
        signatures.extend(fan_out.signatures)
        if fan_out.error_message:
            logger.warning(f"{tier.capitalize()} holders fan-out: {fan_out.error_message}")
        return received, fan_out.distributed
