"""
Pump.fun bonding curve decoding and constant-product quotes.

The curve state is read fresh for every quote and never cached.
"""

import struct
from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey

from jinvault.core.client import SolanaClient
from jinvault.platforms.pumpfun.address_provider import PumpFunAddressProvider
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)

CURVE_DISCRIMINATOR: Final[bytes] = bytes(
    [0x17, 0xB7, 0xF8, 0x37, 0x60, 0xD8, 0xAC, 0x60]
)

# Layout:
# - discriminator: 8 bytes
# - virtual_token_reserves, virtual_sol_reserves, real_token_reserves,
#   real_sol_reserves, token_total_supply: u64 each
# - complete: bool (1 byte)
# - creator: Pubkey (32 bytes), missing on accounts created before it existed
COMPLETE_OFFSET: Final[int] = 48
CREATOR_OFFSET: Final[int] = 49
MIN_CURVE_SIZE: Final[int] = CREATOR_OFFSET
CURVE_WITH_CREATOR_SIZE: Final[int] = CREATOR_OFFSET + 32

BPS_DENOMINATOR: Final[int] = 10_000
SELL_FEE_PERCENT: Final[int] = 1


@dataclass(frozen=True)
class BondingCurveState:
    """Represents the state of a pump.fun bonding curve."""

    virtual_token_reserves: int
    virtual_sol_reserves: int
    real_token_reserves: int
    real_sol_reserves: int
    token_total_supply: int
    complete: bool
    creator: Pubkey

    @property
    def is_tradable(self) -> bool:
        """A complete curve has migrated and must not be swapped against."""
        return (
            not self.complete
            and self.virtual_token_reserves > 0
            and self.virtual_sol_reserves > 0
        )


def decode_bonding_curve(
    data: bytes, default_creator: Pubkey = Pubkey.default()
) -> BondingCurveState | None:
    """Decode bonding curve state from raw account data.

    Args:
        data: Raw account data
        default_creator: Creator to report when the account predates the field

    Returns:
        Decoded state, or None if the data is too short or not a bonding curve
    """
    if len(data) < MIN_CURVE_SIZE:
        logger.debug(f"Bonding curve data too short: {len(data)} bytes")
        return None

    if data[:8] != CURVE_DISCRIMINATOR:
        logger.debug(
            f"Invalid bonding curve discriminator: {data[:8].hex()}, "
            f"expected {CURVE_DISCRIMINATOR.hex()}"
        )
        return None

    (
        virtual_token_reserves,
        virtual_sol_reserves,
        real_token_reserves,
        real_sol_reserves,
        token_total_supply,
    ) = struct.unpack_from("<5Q", data, 8)

    if len(data) >= CURVE_WITH_CREATOR_SIZE:
        creator = Pubkey.from_bytes(data[CREATOR_OFFSET:CURVE_WITH_CREATOR_SIZE])
    else:
        creator = default_creator

    return BondingCurveState(
        virtual_token_reserves=virtual_token_reserves,
        virtual_sol_reserves=virtual_sol_reserves,
        real_token_reserves=real_token_reserves,
        real_sol_reserves=real_sol_reserves,
        token_total_supply=token_total_supply,
        complete=data[COMPLETE_OFFSET] == 1,
        creator=creator,
    )


def calculate_buy_amount_out(state: BondingCurveState, amount_in: int) -> int:
    """Tokens received for `amount_in` lamports.

    tokens_out = amount_in * virtual_token_reserves / (virtual_sol_reserves + amount_in)
    """
    denominator = state.virtual_sol_reserves + amount_in
    if denominator == 0:
        return 0
    return amount_in * state.virtual_token_reserves // denominator


def calculate_sell_amount_out(state: BondingCurveState, amount_in: int) -> int:
    """Lamports received for `amount_in` raw tokens, before the program fee.

    sol_out = amount_in * virtual_sol_reserves / (virtual_token_reserves + amount_in)
    """
    denominator = state.virtual_token_reserves + amount_in
    if denominator == 0:
        return 0
    return amount_in * state.virtual_sol_reserves // denominator


def calculate_max_sol_cost(amount_in: int, slippage_bps: int) -> int:
    """Upper bound on lamports a buy may spend."""
    return amount_in * (BPS_DENOMINATOR + slippage_bps) // BPS_DENOMINATOR


def calculate_min_sol_output(sol_out: int, slippage_bps: int) -> int:
    """Lamport floor for a sell, after the program fee and slippage."""
    after_fee = sol_out - sol_out * SELL_FEE_PERCENT // 100
    return after_fee - after_fee * slippage_bps // BPS_DENOMINATOR


class PumpFunCurveManager:
    """Reads pump.fun bonding curves from the chain."""

    def __init__(
        self,
        client: SolanaClient,
        address_provider: PumpFunAddressProvider | None = None,
    ):
        """Initialize pump.fun curve manager.

        Args:
            client: Solana RPC client
            address_provider: PDA derivations, created when omitted
        """
        self.client = client
        self.address_provider = address_provider or PumpFunAddressProvider()

    async def get_curve_state(
        self, mint: Pubkey, default_creator: Pubkey = Pubkey.default()
    ) -> BondingCurveState | None:
        """Fetch and decode the bonding curve of `mint`.

        Returns:
            Curve state, or None when the account does not exist or is not a curve
        """
        bonding_curve = self.address_provider.derive_bonding_curve(mint)
        logger.debug(f"Fetching bonding curve: {bonding_curve}")

        account = await self.client.get_account_info(bonding_curve)
        if account is None:
            logger.info(f"Bonding curve account not found for {mint}")
            return None

        state = decode_bonding_curve(bytes(account.data), default_creator)
        if state is not None:
            logger.debug(
                f"Bonding curve state: virtual_token_reserves={state.virtual_token_reserves}, "
                f"virtual_sol_reserves={state.virtual_sol_reserves}, "
                f"complete={state.complete}, creator={state.creator}"
            )
        return state
