"""
Periodic distribution runner.
"""

import asyncio
from collections.abc import Awaitable, Callable

from jinvault.interfaces.core import DistributionResult
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)


class DistributionScheduler:
    """Invokes a distribution cycle every `interval` seconds until stopped.

    Overlap with manually triggered cycles is prevented by the orchestrator
    lock; a tick that collides with a running cycle just reports the failure.
    """

    def __init__(
        self,
        run_cycle: Callable[[], Awaitable[DistributionResult]],
        interval: float,
        on_result: Callable[[DistributionResult], None] | None = None,
    ):
        """
        Args:
            run_cycle: Coroutine function running one cycle
            interval: Seconds between the end of one cycle and the start of the next
            on_result: Optional callback receiving each cycle's result
        """
        self.run_cycle = run_cycle
        self.interval = interval
        self.on_result = on_result
        self.cycles_run = 0
        self._stop_event = asyncio.Event()

    async def run_once(self) -> DistributionResult:
        """Run a single cycle and report its result."""
        result = await self.run_cycle()
        self.cycles_run += 1

        if result.success:
            logger.info(
                f"Distribution cycle {self.cycles_run} succeeded: "
                f"{result.total_fees_claimed} lamports claimed, "
                f"{len(result.signatures)} transactions"
            )
        else:
            logger.warning(f"Distribution cycle {self.cycles_run} failed: {result.error}")

        if self.on_result:
            self.on_result(result)
        return result

    async def start(self, max_cycles: int | None = None) -> None:
        """Run cycles until `stop()` is called or `max_cycles` is reached.

        A cycle that raises still counts towards `max_cycles`.
        """
        self._stop_event.clear()
        logger.info(f"Distribution scheduler started, interval {self.interval}s")

        attempts = 0
        while not self._stop_event.is_set():
            attempts += 1
            try:
                await self.run_once()
            except Exception:
                logger.exception("Distribution cycle raised")

            if max_cycles is not None and attempts >= max_cycles:
                break

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

        logger.info("Distribution scheduler stopped")

    def stop(self) -> None:
        self._stop_event.set()
