"""Periodic affiliate stats refresh.

Every tick reloads the affiliate's complete referral/commission snapshot and
recomputes the display totals from scratch; totals are never patched
incrementally.
"""

import logging
from typing import Awaitable, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import settings
from services.affiliate_service import AffiliateService
from services.commission_ledger import DisplayTotals, compute_affiliate_totals

logger = logging.getLogger(__name__)

StatsCallback = Callable[[str, DisplayTotals], Awaitable[None]]


class AffiliateStatsWatcher:
    """
    Pushes reconciled totals to subscribers when an affiliate's log changes.

    Uses APScheduler for async job scheduling.
    """

    def __init__(
        self,
        affiliate_service: AffiliateService,
        interval_seconds: Optional[int] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.affiliate_service = affiliate_service
        self.interval_seconds = interval_seconds or settings.stats_refresh_seconds
        self.scheduler = scheduler or AsyncIOScheduler()
        self._callbacks: Dict[str, StatsCallback] = {}
        self._last_totals: Dict[str, DisplayTotals] = {}
        self._is_running = False

    def start(self) -> None:
        """Start the scheduler."""
        if self._is_running:
            logger.warning("Stats watcher is already running")
            return
        self.scheduler.start()
        self._is_running = True
        logger.info(f"Stats watcher started. Refreshing every {self.interval_seconds}s.")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self._is_running:
            self.scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("Stats watcher stopped")

    def watch(self, affiliate_id: str, callback: StatsCallback) -> Callable[[], None]:
        """
        Subscribe to an affiliate's reconciled totals.

        Args:
            affiliate_id: Affiliate to watch
            callback: Async function called with (affiliate_id, totals)

        Returns:
            Function that cancels the subscription
        """
        self._callbacks[affiliate_id] = callback
        self.scheduler.add_job(
            self.refresh,
            IntervalTrigger(seconds=self.interval_seconds),
            args=[affiliate_id],
            id=self._job_id(affiliate_id),
            name=f"Refresh affiliate stats {affiliate_id}",
            replace_existing=True,
        )
        logger.info(f"Watching affiliate {affiliate_id}")

        def unsubscribe() -> None:
            self.unwatch(affiliate_id)

        return unsubscribe

    def unwatch(self, affiliate_id: str) -> None:
        """Cancel a subscription."""
        if self._callbacks.pop(affiliate_id, None) is None:
            return
        self._last_totals.pop(affiliate_id, None)
        job = self.scheduler.get_job(self._job_id(affiliate_id))
        if job:
            job.remove()
        logger.info(f"Stopped watching affiliate {affiliate_id}")

    async def refresh(self, affiliate_id: str) -> Optional[DisplayTotals]:
        """
        Recompute totals from a full snapshot and notify on change.

        Returns:
            The fresh totals, or None if the affiliate is gone or unwatched
        """
        callback = self._callbacks.get(affiliate_id)
        if callback is None:
            return None

        try:
            affiliate = await self.affiliate_service.get_affiliate(affiliate_id)
        except Exception as e:
            logger.error(f"Error loading affiliate {affiliate_id}: {e}")
            return None
        if not affiliate:
            logger.warning(f"Affiliate {affiliate_id} no longer exists")
            return None

        referrals, commissions = await self.affiliate_service.load_snapshot(affiliate_id)
        totals = compute_affiliate_totals(affiliate, referrals, commissions)

        if self._last_totals.get(affiliate_id) != totals:
            self._last_totals[affiliate_id] = totals
            try:
                await callback(affiliate_id, totals)
            except Exception as e:
                logger.error(f"Stats callback failed for affiliate {affiliate_id}: {e}")

        return totals

    @staticmethod
    def _job_id(affiliate_id: str) -> str:
        return f"affiliate_stats_{affiliate_id}"
