"""Tests for the affiliate stats watcher."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from jobs.stats_watcher import AffiliateStatsWatcher
from services.affiliate_service import AffiliateService


@pytest.fixture
def affiliate_service(make_affiliate, make_referral, make_commission):
    """Affiliate service returning a fixed snapshot."""
    service = MagicMock(spec=AffiliateService)
    service.get_affiliate = AsyncMock(return_value=make_affiliate(total_clicks=1))
    service.load_snapshot = AsyncMock(return_value=(
        [make_referral("clicked"), make_referral("registered")],
        [make_commission("pending", 100)],
    ))
    return service


@pytest.fixture
def scheduler():
    """Mock APScheduler scheduler."""
    return MagicMock()


@pytest.fixture
def watcher(affiliate_service, scheduler):
    """Watcher polling every 5 seconds."""
    return AffiliateStatsWatcher(affiliate_service, interval_seconds=5, scheduler=scheduler)


class TestWatchSubscription:
    """Tests for subscribing and unsubscribing."""

    def test_watch_schedules_job(self, watcher, scheduler):
        """Test watching adds one interval job per affiliate."""
        watcher.watch("user_0001", AsyncMock())

        scheduler.add_job.assert_called_once()
        assert scheduler.add_job.call_args.kwargs["id"] == "affiliate_stats_user_0001"
        assert scheduler.add_job.call_args.kwargs["args"] == ["user_0001"]

    def test_unsubscribe_removes_job(self, watcher, scheduler):
        """Test the returned function cancels the job."""
        job = MagicMock()
        scheduler.get_job.return_value = job

        unsubscribe = watcher.watch("user_0001", AsyncMock())
        unsubscribe()

        job.remove.assert_called_once()

    def test_unwatch_unknown_is_noop(self, watcher, scheduler):
        """Test unwatching something never watched does nothing."""
        watcher.unwatch("nobody")

        scheduler.get_job.assert_not_called()

    def test_start_and_stop(self, watcher, scheduler):
        """Test the scheduler is started once and shut down."""
        watcher.start()
        watcher.start()
        watcher.stop()

        scheduler.start.assert_called_once()
        scheduler.shutdown.assert_called_once_with(wait=False)


class TestRefresh:
    """Tests for refresh."""

    @pytest.mark.asyncio
    async def test_refresh_notifies_with_totals(self, watcher):
        """Test the callback receives reconciled totals."""
        callback = AsyncMock()
        watcher.watch("user_0001", callback)

        totals = await watcher.refresh("user_0001")

        callback.assert_awaited_once_with("user_0001", totals)
        assert totals.display_clicks == 2
        assert totals.display_referrals == 1
        assert totals.pending_total == 100

    @pytest.mark.asyncio
    async def test_unchanged_totals_not_pushed_again(self, watcher):
        """Test an identical snapshot does not call back twice."""
        callback = AsyncMock()
        watcher.watch("user_0001", callback)

        await watcher.refresh("user_0001")
        await watcher.refresh("user_0001")

        assert callback.await_count == 1

    @pytest.mark.asyncio
    async def test_changed_totals_pushed(self, watcher, affiliate_service, make_commission):
        """Test a new commission triggers another callback."""
        callback = AsyncMock()
        watcher.watch("user_0001", callback)
        await watcher.refresh("user_0001")

        affiliate_service.load_snapshot.return_value = ([], [make_commission("approved", 200)])
        totals = await watcher.refresh("user_0001")

        assert callback.await_count == 2
        assert totals.approved_total == 200

    @pytest.mark.asyncio
    async def test_unwatched_affiliate_not_loaded(self, watcher, affiliate_service):
        """Test refresh without a subscriber skips the store."""
        assert await watcher.refresh("user_0001") is None
        affiliate_service.load_snapshot.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_affiliate(self, watcher, affiliate_service):
        """Test a deleted affiliate yields no totals."""
        affiliate_service.get_affiliate.return_value = None
        callback = AsyncMock()
        watcher.watch("user_0001", callback)

        assert await watcher.refresh("user_0001") is None
        callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_callback_error_is_logged(self, watcher):
        """Test a failing subscriber does not break the refresh."""
        watcher.watch("user_0001", AsyncMock(side_effect=RuntimeError("boom")))

        totals = await watcher.refresh("user_0001")

        assert totals is not None

    @pytest.mark.asyncio
    async def test_refresh_uses_service_lookup(self, watcher, affiliate_service):
        """Test the affiliate is loaded through the service."""
        watcher.watch("user_0001", AsyncMock())

        await watcher.refresh("user_0001")

        affiliate_service.get_affiliate.assert_awaited_once_with("user_0001")
        assert not hasattr(affiliate_service, "affiliate_repo")
