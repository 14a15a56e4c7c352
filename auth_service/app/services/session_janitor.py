"""
Session Janitor

Periodically hard-deletes sessions whose refresh horizon has passed.
"""

import logging
from datetime import datetime, timedelta
from typing import AsyncContextManager, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.domain.base import utc_now

logger = logging.getLogger(__name__)

JOB_ID = "session_janitor_sweep"


class SessionJanitor:
    """
    Reclaims storage held by dead sessions.

    Business Rules:
    - Deletes every session with refresh_expires_at < now, revoked or not
    - Revoked sessions still inside their refresh horizon are kept for audit
    - A failed tick is logged and retried on the next tick, never raised
    """

    def __init__(
        self,
        uow_scope: Callable[[], AsyncContextManager[UnitOfWork]],
        interval: timedelta,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.uow_scope = uow_scope
        self.interval = interval
        self.clock = clock
        self._scheduler: Optional[AsyncIOScheduler] = None

    async def sweep(self, now: datetime) -> int:
        """
        Delete sessions with refresh_expires_at < now.

        Returns:
            Number of reclaimed sessions
        """
        async with self.uow_scope() as uow:
            async with uow:
                count = await uow.sessions.delete_refresh_expired_before(now)
                await uow.commit()

        if count:
            logger.info(f"Session janitor reclaimed {count} expired session(s)")
        return count

    async def run_once(self) -> None:
        """Scheduler entry point: one sweep, failures logged only"""
        try:
            await self.sweep(self.clock())
        except Exception:
            logger.exception("Session janitor sweep failed, retrying next tick")

    def start(self) -> None:
        if self._scheduler is not None:
            return
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_once,
            IntervalTrigger(seconds=self.interval.total_seconds()),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(f"Session janitor scheduled every {self.interval}")

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Session janitor stopped")

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running
