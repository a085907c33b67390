"""
Core interfaces and result types for the fee distribution client.

Every operation that touches the chain reports back through one of the
result dataclasses below instead of raising, so callers (scheduler, CLI,
an HTTP layer) can tell "nothing to do" apart from "something broke".
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from solders.pubkey import Pubkey

PERCENTAGE_TOLERANCE = 1e-6


class SwapDirection(Enum):
    """Direction of a swap against the protocol token."""

    BUY = "buy"  # SOL -> protocol token
    SELL = "sell"  # protocol token -> SOL


class SwapVenue(Enum):
    """Where a swap was executed."""

    BONDING_CURVE = "bonding_curve"
    AGGREGATOR = "aggregator"


class ClaimSource(Enum):
    """Creator vault a claim was taken from."""

    NONE = "none"
    BONDING_CURVE = "bonding_curve"
    AMM = "amm"


@dataclass(frozen=True)
class HolderInfo:
    """A wallet holding the protocol token.

    `balance` is decimal-adjusted, `percentage` is of total supply (0-100).
    """

    address: Pubkey
    balance: float
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": str(self.address),
            "balance": self.balance,
            "percentage": self.percentage,
        }


@dataclass
class HolderTiers:
    """Holders partitioned by minimum percentage of supply."""

    major_holders: list[HolderInfo] = field(default_factory=list)
    medium_holders: list[HolderInfo] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.major_holders and not self.medium_holders

    def to_dict(self) -> dict[str, Any]:
        return {
            "major_holders": [holder.to_dict() for holder in self.major_holders],
            "medium_holders": [holder.to_dict() for holder in self.medium_holders],
        }


@dataclass
class InitResult:
    """Outcome of validating the chain client configuration."""

    ready: bool
    error: str | None = None


@dataclass
class SwapResult:
    """Result of a swap through the router."""

    success: bool
    amount_in: int = 0
    amount_out: int = 0
    signature: str | None = None
    venue: SwapVenue | None = None
    error_message: str | None = None
    logs: list[str] = field(default_factory=list)


@dataclass
class ClaimResult:
    """Result of a creator fee claim. Amount is in lamports."""

    success: bool
    amount: int = 0
    signature: str | None = None
    source: ClaimSource = ClaimSource.NONE
    error_message: str | None = None


@dataclass
class FanOutResult:
    """Result of distributing a token amount across holders."""

    success: bool
    distributed: int = 0
    recipients: int = 0
    signatures: list[str] = field(default_factory=list)
    error_message: str | None = None


@dataclass
class DistributionResult:
    """Outcome of one distribution cycle.

    Amounts are raw on-chain units: lamports for fees, base units of the
    reward asset for gold fields, base units of the protocol token for the
    buyback.
    """

    success: bool
    total_fees_claimed: int = 0
    gold_purchased: int = 0
    gold_distributed: int = 0
    gold_for_medium_holders: int = 0
    token_buyback: int = 0
    major_holders: int = 0
    medium_holders: int = 0
    signatures: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class DistributionConfig:
    """Percentage split and tier thresholds for a distribution cycle."""

    major_holders_percentage: float = 70.0
    medium_holders_percentage: float = 20.0
    buyback_percentage: float = 10.0
    major_min_percentage: float = 0.5
    medium_min_percentage: float = 0.1

    def validate(self) -> str | None:
        """Check the split and thresholds.

        Returns:
            Error message, or None when the config is usable
        """
        splits = (
            self.major_holders_percentage,
            self.medium_holders_percentage,
            self.buyback_percentage,
        )
        if any(value < 0 for value in splits):
            return "Invalid config: percentages cannot be negative"

        total = sum(splits)
        if abs(total - 100) > PERCENTAGE_TOLERANCE:
            return f"Invalid config: percentages sum to {total}% (must be exactly 100%)"

        if self.medium_min_percentage < 0:
            return "Invalid config: holder thresholds cannot be negative"
        if self.major_min_percentage < self.medium_min_percentage:
            return (
                "Invalid config: major_min_percentage must be >= medium_min_percentage"
            )
        return None


class ChainClient(ABC):
    """Capability interface for everything the service exposes to callers.

    One implementation talks to the chain, the other reports every feature
    as disabled. Which one is used is decided once, from configuration.
    """

    @abstractmethod
    async def initialize(self) -> InitResult:
        """Validate configuration and prepare connections."""
        pass

    @abstractmethod
    def get_wallet_address(self) -> str | None:
        """Base58 address of the distributor wallet, if configured."""
        pass

    @abstractmethod
    async def get_sol_balance(self) -> int:
        """Native balance of the distributor wallet in lamports."""
        pass

    @abstractmethod
    async def get_token_balance(self) -> int:
        """Protocol token balance of the distributor wallet in base units."""
        pass

    @abstractmethod
    async def get_holders_by_tier(self) -> HolderTiers:
        """Current major and medium holders of the protocol token."""
        pass

    @abstractmethod
    async def claim_fees(self) -> ClaimResult:
        """Claim accumulated creator fees."""
        pass

    @abstractmethod
    async def buyback(self, lamports: int) -> SwapResult:
        """Buy the protocol token with `lamports` of SOL."""
        pass

    @abstractmethod
    async def sell_token(self, amount: int) -> SwapResult:
        """Sell `amount` base units of the protocol token for SOL."""
        pass

    @abstractmethod
    async def execute_distribution(
        self, config: DistributionConfig | None = None
    ) -> DistributionResult:
        """Run one claim, swap, fan-out and buyback cycle."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        pass
