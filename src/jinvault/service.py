"""
Chain client implementations selected from configuration.

`create_session_manager` builds admin sessions from the `admin` section.
`SolanaChainClient` wires the wallet, RPC client, router, claimer, holder
classifier and orchestrator together. `DisabledChainClient` has the same
shape and reports every feature as disabled.
"""

from typing import Any

from solders.pubkey import Pubkey

from jinvault.auth.sessions import DEFAULT_SESSION_TTL, SessionManager
from jinvault.config_loader import get_distribution_config
from jinvault.core.client import SolanaClient
from jinvault.core.priority_fee.manager import PriorityFeeManager
from jinvault.core.pubkeys import GOLD_MINT, TOKEN_2022_PROGRAM
from jinvault.core.wallet import Wallet
from jinvault.distribution.fanout import TokenDistributor
from jinvault.distribution.fee_claimer import FeeClaimer
from jinvault.distribution.holders import HolderClassifier
from jinvault.distribution.orchestrator import DistributionOrchestrator
from jinvault.interfaces.core import (
    ChainClient,
    ClaimResult,
    DistributionConfig,
    DistributionResult,
    HolderTiers,
    InitResult,
    SwapDirection,
    SwapResult,
)
from jinvault.platforms.jupiter.client import DEFAULT_BASE_URL, JupiterClient
from jinvault.platforms.pumpfun.address_provider import PumpFunAddressProvider
from jinvault.trading.router import SwapRouter
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)

DISABLED_MESSAGE = "Blockchain features disabled"


class SolanaChainClient(ChainClient):
    """Chain client backed by a Solana RPC endpoint."""

    def __init__(
        self,
        rpc_endpoint: str,
        private_key: str | None,
        token_mint: str | None,
        reward_mint: str | Pubkey = GOLD_MINT,
        distribution: DistributionConfig | None = None,
        buy_slippage_bps: int = 1000,
        sell_slippage_bps: int = 500,
        curve_slippage_bps: int = 1000,
        reward_slippage_bps: int = 100,
        enable_dynamic_priority_fee: bool = False,
        enable_fixed_priority_fee: bool = False,
        fixed_priority_fee: int = 100_000,
        extra_priority_fee: float = 0.0,
        hard_cap_priority_fee: int = 1_000_000,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        jupiter_base_url: str = DEFAULT_BASE_URL,
        jupiter_timeout: float = 30.0,
        holders_limit: int | None = None,
    ):
        self.rpc_endpoint = rpc_endpoint
        self.private_key = private_key
        self.token_mint_address = token_mint
        self.reward_mint = (
            reward_mint if isinstance(reward_mint, Pubkey) else Pubkey.from_string(reward_mint)
        )
        self.distribution = distribution or DistributionConfig()
        self.buy_slippage_bps = buy_slippage_bps
        self.sell_slippage_bps = sell_slippage_bps
        self.curve_slippage_bps = curve_slippage_bps
        self.reward_slippage_bps = reward_slippage_bps
        self.enable_dynamic_priority_fee = enable_dynamic_priority_fee
        self.enable_fixed_priority_fee = enable_fixed_priority_fee
        self.fixed_priority_fee = fixed_priority_fee
        self.extra_priority_fee = extra_priority_fee
        self.hard_cap_priority_fee = hard_cap_priority_fee
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.jupiter_base_url = jupiter_base_url
        self.jupiter_timeout = jupiter_timeout
        self.holders_limit = holders_limit

        self.client = SolanaClient(rpc_endpoint)
        self.wallet: Wallet | None = None
        self.token_mint: Pubkey | None = None
        self.router: SwapRouter | None = None
        self.fee_claimer: FeeClaimer | None = None
        self.classifier: HolderClassifier | None = None
        self.orchestrator: DistributionOrchestrator | None = None

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "SolanaChainClient":
        """Build a client from a loaded configuration dictionary."""
        trade = cfg.get("trade", {})
        priority_fees = cfg.get("priority_fees", {})
        retries = cfg.get("retries", {})
        jupiter = cfg.get("jupiter", {})

        return cls(
            rpc_endpoint=cfg["rpc_endpoint"],
            private_key=cfg.get("private_key"),
            token_mint=cfg.get("token_mint"),
            reward_mint=cfg.get("reward_mint") or GOLD_MINT,
            distribution=get_distribution_config(cfg),
            buy_slippage_bps=trade.get("buy_slippage_bps", 1000),
            sell_slippage_bps=trade.get("sell_slippage_bps", 500),
            curve_slippage_bps=trade.get("curve_slippage_bps", 1000),
            reward_slippage_bps=trade.get("reward_slippage_bps", 100),
            enable_dynamic_priority_fee=priority_fees.get("enable_dynamic", False),
            enable_fixed_priority_fee=priority_fees.get("enable_fixed", False),
            fixed_priority_fee=priority_fees.get("fixed_amount", 100_000),
            extra_priority_fee=priority_fees.get("extra_percentage", 0.0),
            hard_cap_priority_fee=priority_fees.get("hard_cap", 1_000_000),
            max_attempts=retries.get("max_attempts", 3),
            retry_delay=retries.get("delay", 2.0),
            jupiter_base_url=jupiter.get("base_url", DEFAULT_BASE_URL),
            jupiter_timeout=jupiter.get("timeout", 30.0),
            holders_limit=cfg.get("holders", {}).get("limit"),
        )

    async def initialize(self) -> InitResult:
        """Load the wallet and token mint and wire up components.

        Missing or invalid settings produce a not-ready result, never an exception.
        """
        if self.orchestrator is not None:
            return InitResult(ready=True)

        if not self.private_key:
            return InitResult(ready=False, error="private_key not configured")
        if not self.token_mint_address:
            return InitResult(ready=False, error="token_mint not configured")

        try:
            self.wallet = Wallet(self.private_key)
            self.token_mint = Pubkey.from_string(self.token_mint_address)
        except Exception:
            return InitResult(ready=False, error="Invalid wallet private key or token address")

        priority_fee_manager = None
        if self.enable_dynamic_priority_fee or self.enable_fixed_priority_fee:
            priority_fee_manager = PriorityFeeManager(
                client=self.client,
                enable_dynamic_fee=self.enable_dynamic_priority_fee,
                enable_fixed_fee=self.enable_fixed_priority_fee,
                fixed_fee=self.fixed_priority_fee,
                extra_fee=self.extra_priority_fee,
                hard_cap=self.hard_cap_priority_fee,
            )

        self.router = SwapRouter(
            self.client,
            self.wallet,
            self.token_mint,
            JupiterClient(self.jupiter_base_url, self.jupiter_timeout),
            priority_fee_manager=priority_fee_manager,
            curve_slippage_bps=self.curve_slippage_bps,
            buy_slippage_bps=self.buy_slippage_bps,
            sell_slippage_bps=self.sell_slippage_bps,
            max_attempts=self.max_attempts,
            retry_delay=self.retry_delay,
        )
        self.fee_claimer = FeeClaimer(self.client, self.wallet)

        bonding_curve = PumpFunAddressProvider().derive_bonding_curve(self.token_mint)
        self.classifier = HolderClassifier(
            self.client,
            self.token_mint,
            excluded_owners=[self.wallet.pubkey, bonding_curve],
            limit=self.holders_limit,
        )
        self.orchestrator = DistributionOrchestrator(
            self.client,
            self.wallet,
            self.fee_claimer,
            self.classifier,
            self.router,
            TokenDistributor(self.client, self.wallet, self.reward_mint),
            self.reward_mint,
            reward_slippage_bps=self.reward_slippage_bps,
        )

        logger.info(f"Chain client ready, wallet {self.wallet.pubkey}, token {self.token_mint}")
        return InitResult(ready=True)

    def get_wallet_address(self) -> str | None:
        return str(self.wallet.pubkey) if self.wallet else None

    async def get_sol_balance(self) -> int:
        if not (await self.initialize()).ready:
            return 0
        try:
            return await self.client.get_balance(self.wallet.pubkey)
        except Exception:
            logger.exception("Failed to read SOL balance")
            return 0

    async def get_token_balance(self) -> int:
        if not (await self.initialize()).ready:
            return 0
        try:
            mint_info = await self.client.get_mint_info(self.token_mint)
            token_program = (
                mint_info.token_program if mint_info and mint_info.token_program else TOKEN_2022_PROGRAM
            )
            token_account = self.wallet.get_associated_token_address(self.token_mint, token_program)
            return await self.client.get_token_account_balance(token_account)
        except Exception:
            logger.exception("Failed to read token balance")
            return 0

    async def get_holders_by_tier(self) -> HolderTiers:
        if not (await self.initialize()).ready:
            return HolderTiers()
        try:
            return await self.classifier.classify(
                self.distribution.major_min_percentage,
                self.distribution.medium_min_percentage,
            )
        except Exception:
            logger.exception("Failed to classify holders")
            return HolderTiers()

    async def claim_fees(self) -> ClaimResult:
        init = await self.initialize()
        if not init.ready:
            return ClaimResult(success=False, error_message=init.error)
        return await self.fee_claimer.claim_fees()

    async def buyback(self, lamports: int) -> SwapResult:
        init = await self.initialize()
        if not init.ready:
            return SwapResult(success=False, error_message=init.error)
        return await self.router.quote_and_swap(SwapDirection.BUY, lamports)

    async def sell_token(self, amount: int) -> SwapResult:
        init = await self.initialize()
        if not init.ready:
            return SwapResult(success=False, error_message=init.error)
        return await self.router.quote_and_swap(SwapDirection.SELL, amount)

    async def execute_distribution(
        self, config: DistributionConfig | None = None
    ) -> DistributionResult:
        init = await self.initialize()
        if not init.ready:
            return DistributionResult(success=False, error=init.error)
        return await self.orchestrator.execute(config or self.distribution)

    async def close(self) -> None:
        await self.client.close()


class DisabledChainClient(ChainClient):
    """Stand-in used when chain features are switched off."""

    async def initialize(self) -> InitResult:
        return InitResult(ready=False, error=DISABLED_MESSAGE)

    def get_wallet_address(self) -> str | None:
        return None

    async def get_sol_balance(self) -> int:
        return 0

    async def get_token_balance(self) -> int:
        return 0

    async def get_holders_by_tier(self) -> HolderTiers:
        return HolderTiers()

    async def claim_fees(self) -> ClaimResult:
        return ClaimResult(success=False, error_message=DISABLED_MESSAGE)

    async def buyback(self, lamports: int) -> SwapResult:
        return SwapResult(success=False, error_message=DISABLED_MESSAGE)

    async def sell_token(self, amount: int) -> SwapResult:
        return SwapResult(success=False, error_message=DISABLED_MESSAGE)

    async def execute_distribution(
        self, config: DistributionConfig | None = None
    ) -> DistributionResult:
        return DistributionResult(success=False, error=DISABLED_MESSAGE)

    async def close(self) -> None:
        pass


def create_chain_client(cfg: dict[str, Any]) -> ChainClient:
    """Pick the chain client implementation from configuration."""
    if not cfg.get("enabled", True):
        logger.info("Chain features disabled by configuration")
        return DisabledChainClient()
    return SolanaChainClient.from_config(cfg)


def create_session_manager(cfg: dict[str, Any]) -> SessionManager:
    """Build the admin session manager from the `admin` section.

    An empty or missing password leaves admin login disabled.
    """
    admin = cfg.get("admin") or {}
    return SessionManager(
        admin.get("password") or None,
        ttl=admin.get("session_ttl", DEFAULT_SESSION_TTL),
    )
