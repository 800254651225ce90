"""
Session Sweeper
===============
Background task that periodically removes expired OTP sessions.
"""

import asyncio
from typing import Optional
import structlog

logger = structlog.get_logger(__name__)


class SessionSweeper:
    """
    Runs `cleanup_expired_sessions` on a fixed interval.
    
    Example:
        sweeper = SessionSweeper(manager, interval_seconds=300)
        sweeper.start()
        ...
        await sweeper.stop()
    """
    
    def __init__(self, manager, interval_seconds: Optional[float] = None):
        self.manager = manager
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None
            else manager.config.cleanup_interval_seconds
        )
        self._task: Optional[asyncio.Task] = None
    
    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
    
    async def run_once(self) -> int:
        """Run a single sweep. Errors are logged, not raised."""
        try:
            return await self.manager.cleanup_expired_sessions()
        except Exception as e:
            logger.error("OTP session sweep failed", error=str(e))
            return 0
    
    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.run_once()
    
    def start(self) -> None:
        """Start the sweep loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info("OTP session sweeper started", interval=self.interval_seconds)
    
    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("OTP session sweeper stopped")
