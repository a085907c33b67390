"""
Swap routing between the pump.fun bonding curve and the Jupiter aggregator.

The bonding curve is always tried first. Only a curve that is missing or
complete sends the swap to Jupiter; a curve that rejects the trade is a
terminal failure.
"""

import asyncio

from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from jinvault.core.client import SolanaClient
from jinvault.core.errors import (
    AggregatorError,
    ChainClientError,
    InsufficientBalanceError,
    TransactionFailedError,
)
from jinvault.core.priority_fee.manager import PriorityFeeManager
from jinvault.core.pubkeys import LAMPORTS_PER_SOL, SOL_MINT, TOKEN_2022_PROGRAM
from jinvault.core.wallet import Wallet
from jinvault.interfaces.core import SwapDirection, SwapResult, SwapVenue
from jinvault.platforms.jupiter.client import JupiterClient
from jinvault.platforms.pumpfun.curve_manager import (
    PumpFunCurveManager,
    calculate_buy_amount_out,
    calculate_max_sol_cost,
    calculate_min_sol_output,
    calculate_sell_amount_out,
)
from jinvault.platforms.pumpfun.instruction_builder import PumpFunInstructionBuilder
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)

# SOL kept on top of the swap amount for fees and account rent
BUY_BALANCE_BUFFER_PERCENT = 15

BUY_COMPUTE_UNITS = 400_000
BUY_PRIORITY_FEE = 100_000
SELL_COMPUTE_UNITS = 200_000
SELL_PRIORITY_FEE = 50_000


class SwapRouter:
    """Swaps SOL and the protocol token, plus arbitrary pairs via Jupiter."""

    def __init__(
        self,
        client: SolanaClient,
        wallet: Wallet,
        token_mint: Pubkey,
        jupiter: JupiterClient,
        priority_fee_manager: PriorityFeeManager | None = None,
        curve_slippage_bps: int = 1000,
        buy_slippage_bps: int = 1000,
        sell_slippage_bps: int = 500,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
    ):
        """
        Args:
            client: Solana RPC client
            wallet: Signing wallet
            token_mint: Protocol token mint
            jupiter: Aggregator client for the fallback path
            priority_fee_manager: Overrides the fixed compute unit prices when set
            curve_slippage_bps: Slippage guard on bonding curve trades
            buy_slippage_bps: Aggregator slippage when buying the protocol token
            sell_slippage_bps: Aggregator slippage when selling the protocol token
            max_attempts: Aggregator submission attempts
            retry_delay: Seconds between aggregator submission attempts
        """
        self.client = client
        self.wallet = wallet
        self.token_mint = token_mint
        self.jupiter = jupiter
        self.priority_fee_manager = priority_fee_manager
        self.curve_slippage_bps = curve_slippage_bps
        self.buy_slippage_bps = buy_slippage_bps
        self.sell_slippage_bps = sell_slippage_bps
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

        self.curve_manager = PumpFunCurveManager(client)
        self.instruction_builder = PumpFunInstructionBuilder(
            self.curve_manager.address_provider
        )

    async def quote_and_swap(self, direction: SwapDirection, amount_in: int) -> SwapResult:
        """Swap against the protocol token, curve first, Jupiter as fallback.

        Args:
            direction: BUY spends lamports, SELL spends raw protocol tokens
            amount_in: Input amount in raw units

        Returns:
            SwapResult with the quoted output amount and signature
        """
        if amount_in <= 0:
            return SwapResult(success=False, error_message="Invalid swap amount")

        try:
            token_program = await self._get_token_program()
            await self._check_balance(direction, amount_in, token_program)

            state = await self.curve_manager.get_curve_state(
                self.token_mint, default_creator=self.wallet.pubkey
            )
            if state is None or not state.is_tradable:
                reason = "not found" if state is None else "complete"
                logger.info(f"Bonding curve {reason}, routing {direction.value} via Jupiter")
                return await self._swap_via_aggregator_for_direction(direction, amount_in)

            if direction == SwapDirection.BUY:
                return await self._buy_on_curve(state, amount_in, token_program)
            return await self._sell_on_curve(state, amount_in, token_program)

        except InsufficientBalanceError as e:
            logger.warning(str(e))
            return SwapResult(success=False, amount_in=amount_in, error_message=str(e))
        except TransactionFailedError as e:
            logger.error(f"Bonding curve {direction.value} rejected: {e!s}")
            return SwapResult(
                success=False,
                amount_in=amount_in,
                venue=SwapVenue.BONDING_CURVE,
                error_message=str(e),
                logs=e.logs,
            )
        except Exception as e:
            logger.exception(f"{direction.value.capitalize()} operation failed")
            return SwapResult(success=False, amount_in=amount_in, error_message=str(e))

    async def swap_via_aggregator(
        self,
        input_mint: Pubkey,
        output_mint: Pubkey,
        amount_in: int,
        slippage_bps: int,
        dynamic_slippage: dict[str, int] | None = None,
    ) -> SwapResult:
        """Swap any pair through Jupiter.

        A failed quote is returned immediately, as is a program rejection of
        the signed transaction. Confirmation timeouts and other client errors
        are retried up to `max_attempts` times with a fixed delay.

        Args:
            input_mint: Mint being sold
            output_mint: Mint being bought
            amount_in: Input amount in raw units
            slippage_bps: Quote slippage in basis points
            dynamic_slippage: Optional bounds passed to the swap endpoint

        Returns:
            SwapResult with the quoted output amount
        """
        if amount_in <= 0:
            return SwapResult(success=False, error_message="Invalid swap amount")

        try:
            quote = await self.jupiter.get_quote(
                input_mint, output_mint, amount_in, slippage_bps
            )
            unsigned = await self.jupiter.get_swap_transaction(
                self.wallet.pubkey, quote, dynamic_slippage
            )
        except AggregatorError as e:
            logger.error(f"Jupiter swap preparation failed: {e!s}")
            return SwapResult(
                success=False,
                amount_in=amount_in,
                venue=SwapVenue.AGGREGATOR,
                error_message=str(e),
            )

        amount_out = int(quote["outAmount"])
        transaction = VersionedTransaction(unsigned.message, [self.wallet.keypair])

        last_error: ChainClientError | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                signature = await self.client.send_and_confirm(transaction)
                logger.info(f"Jupiter swap confirmed: {signature}")
                return SwapResult(
                    success=True,
                    amount_in=amount_in,
                    amount_out=amount_out,
                    signature=signature,
                    venue=SwapVenue.AGGREGATOR,
                )
            except TransactionFailedError as e:
                logger.error(f"Jupiter swap rejected: {e!s}")
                return SwapResult(
                    success=False,
                    amount_in=amount_in,
                    venue=SwapVenue.AGGREGATOR,
                    error_message=str(e),
                    logs=e.logs,
                )
            except ChainClientError as e:
                last_error = e
                if attempt < self.max_attempts:
                    logger.warning(
                        f"Swap attempt {attempt} failed: {e!s}, retrying in {self.retry_delay}s"
                    )
                    await asyncio.sleep(self.retry_delay)

        logger.error(f"Jupiter swap failed after {self.max_attempts} attempts: {last_error!s}")
        return SwapResult(
            success=False,
            amount_in=amount_in,
            venue=SwapVenue.AGGREGATOR,
            error_message=str(last_error),
        )

    async def _swap_via_aggregator_for_direction(
        self, direction: SwapDirection, amount_in: int
    ) -> SwapResult:
        if direction == SwapDirection.BUY:
            return await self.swap_via_aggregator(
                SOL_MINT,
                self.token_mint,
                amount_in,
                self.buy_slippage_bps,
                dynamic_slippage={"minBps": 200, "maxBps": 1500},
            )
        return await self.swap_via_aggregator(
            self.token_mint,
            SOL_MINT,
            amount_in,
            self.sell_slippage_bps,
            dynamic_slippage={"minBps": 100, "maxBps": 500},
        )

    async def _buy_on_curve(self, state, amount_in: int, token_program: Pubkey) -> SwapResult:
        token_amount = calculate_buy_amount_out(state, amount_in)
        max_sol_cost = calculate_max_sol_cost(amount_in, self.curve_slippage_bps)

        logger.info(
            f"Pump.fun quote: {amount_in / LAMPORTS_PER_SOL:.6f} SOL -> ~{token_amount} tokens, "
            f"max SOL cost {max_sol_cost / LAMPORTS_PER_SOL:.6f}"
        )

        instruction = self.instruction_builder.build_buy_instruction(
            self.token_mint,
            self.wallet.pubkey,
            state.creator,
            token_amount,
            max_sol_cost,
            token_program,
        )
        priority_fee = await self._priority_fee(
            self.instruction_builder.get_required_accounts_for_buy(
                self.token_mint, self.wallet.pubkey, state.creator
            ),
            BUY_PRIORITY_FEE,
        )

        signature = await self.client.build_and_send_transaction(
            [instruction],
            self.wallet.keypair,
            compute_unit_limit=BUY_COMPUTE_UNITS,
            priority_fee=priority_fee,
        )
        logger.info(f"Pump.fun buy confirmed: {signature}")
        return SwapResult(
            success=True,
            amount_in=amount_in,
            amount_out=token_amount,
            signature=signature,
            venue=SwapVenue.BONDING_CURVE,
        )

    async def _sell_on_curve(self, state, amount_in: int, token_program: Pubkey) -> SwapResult:
        sol_out = calculate_sell_amount_out(state, amount_in)
        expected = calculate_min_sol_output(sol_out, 0)
        min_sol_output = calculate_min_sol_output(sol_out, self.curve_slippage_bps)

        logger.info(
            f"Pump.fun sell quote: {amount_in} tokens -> ~{expected / LAMPORTS_PER_SOL:.9f} SOL, "
            f"min {min_sol_output / LAMPORTS_PER_SOL:.9f} SOL"
        )

        instruction = self.instruction_builder.build_sell_instruction(
            self.token_mint,
            self.wallet.pubkey,
            amount_in,
            min_sol_output,
            token_program,
        )
        priority_fee = await self._priority_fee(
            self.instruction_builder.get_required_accounts_for_sell(
                self.token_mint, self.wallet.pubkey
            ),
            SELL_PRIORITY_FEE,
        )

        signature = await self.client.build_and_send_transaction(
            [instruction],
            self.wallet.keypair,
            compute_unit_limit=SELL_COMPUTE_UNITS,
            priority_fee=priority_fee,
        )
        logger.info(f"Pump.fun sell confirmed: {signature}")
        return SwapResult(
            success=True,
            amount_in=amount_in,
            amount_out=expected,
            signature=signature,
            venue=SwapVenue.BONDING_CURVE,
        )

    async def _check_balance(
        self, direction: SwapDirection, amount_in: int, token_program: Pubkey
    ) -> None:
        if direction == SwapDirection.BUY:
            balance = await self.client.get_balance(self.wallet.pubkey)
            required = amount_in * (100 + BUY_BALANCE_BUFFER_PERCENT) // 100
            if balance < required:
                raise InsufficientBalanceError(
                    f"Insufficient SOL balance: have {balance / LAMPORTS_PER_SOL} SOL, "
                    f"need ~{required / LAMPORTS_PER_SOL} SOL (including fees)"
                )
            return

        token_account = self.wallet.get_associated_token_address(
            self.token_mint, token_program
        )
        balance = await self.client.get_token_account_balance(token_account)
        if balance < amount_in:
            raise InsufficientBalanceError(
                f"Insufficient token balance: {balance} < {amount_in}"
            )

    async def _get_token_program(self) -> Pubkey:
        mint_info = await self.client.get_mint_info(self.token_mint)
        if mint_info is None or mint_info.token_program is None:
            return TOKEN_2022_PROGRAM
        return mint_info.token_program

    async def _priority_fee(self, accounts: list[Pubkey], default: int) -> int | None:
        if self.priority_fee_manager is None:
            return default
        return await self.priority_fee_manager.calculate_priority_fee(accounts)
