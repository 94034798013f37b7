"""Background sweep of stale verification codes."""

import asyncio

import logfire
from dishka import AsyncContainer

from saver.domain.service import VerificationCodeService


class VerificationCodeSweeper:
    """Deletes expired and aged-out verified codes on a fixed interval.

    Runs one sweep as soon as it starts, then one per interval. Each sweep
    gets its own request scope, so its database work commits independently
    of any HTTP request. A failing sweep is logged and the loop carries on.

    Example:
        sweeper = VerificationCodeSweeper(container, interval_seconds=3600)
        sweeper.start()
        ...
        await sweeper.stop()
    """

    def __init__(self, container: AsyncContainer, interval_seconds: float) -> None:
        self._container = container
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Start sweeping in a background task."""
        if self.running:
            raise RuntimeError("Sweeper already started")
        self._task = asyncio.create_task(self._run(), name="verification-code-sweeper")
        logfire.info("Verification code sweeper started", interval=self._interval)
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it to unwind."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logfire.info("Verification code sweeper stopped")

    async def sweep_once(self) -> int:
        """Run one sweep.

        Returns:
            Number of codes deleted
        """
        async with self._container() as scope:
            service = await scope.get(VerificationCodeService)
            return await service.cleanup_expired()

    async def _run(self) -> None:
        while True:
            try:
                await self.sweep_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logfire.error(
                    "Verification code sweep failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
            await asyncio.sleep(self._interval)
