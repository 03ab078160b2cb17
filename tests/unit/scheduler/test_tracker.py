"""Unit tests for ShowTracker."""

import pytest

from cinetrack.errors import UpstreamError
from cinetrack.scheduler import ShowMeta, ShowState, ShowTracker


@pytest.fixture
def tracker(scheduler, fake_tmdb, clock):
    return ShowTracker(scheduler, fake_tmdb.client(), clock=clock)


@pytest.mark.asyncio
class TestSyncShow:
    async def test_future_episode_is_scheduled(self, tracker, scheduler, make_show):
        state = await tracker.sync_show(make_show(42, name="Severance", air_date="2025-01-17", season=2, episode=1))

        assert state is ShowState.SCHEDULED
        assert [e.show_id for e in await scheduler.get_all_scheduled()] == ["42"]
        assert await scheduler.get_show_meta(42) == ShowMeta("Severance", "S2E1")

    async def test_unknown_air_date_goes_to_tba(self, tracker, scheduler, make_show):
        state = await tracker.sync_show(make_show(42))

        assert state is ShowState.TBA
        assert await scheduler.get_tba_shows() == ["42"]

    async def test_air_date_becoming_known_moves_from_tba(self, tracker, scheduler, make_show):
        await tracker.sync_show(make_show(42))
        await tracker.sync_show(make_show(42, air_date="2025-03-01"))

        assert await scheduler.get_tba_shows() == []
        assert [e.show_id for e in await scheduler.get_all_scheduled()] == ["42"]

    async def test_past_air_date_leaves_state_alone(self, tracker, scheduler, make_show):
        state = await tracker.sync_show(make_show(42, air_date="2024-12-01"))

        assert state is ShowState.UNCHANGED
        assert await scheduler.get_all_scheduled() == []
        assert await scheduler.get_tba_shows() == []

    @pytest.mark.parametrize("status", ["Ended", "Canceled"])
    async def test_finished_show_is_removed(self, tracker, scheduler, make_show, status):
        await scheduler.add_to_tba(42)

        state = await tracker.sync_show(make_show(42, status=status, air_date="2025-03-01"))

        assert state is ShowState.ENDED
        assert await scheduler.get_tba_shows() == []
        assert await scheduler.get_all_scheduled() == []

    async def test_unavailable_store_reports_unchanged(self, tracker, memory_store, make_show):
        memory_store.set_available(False)
        assert await tracker.sync_show(make_show(42, air_date="2025-03-01")) is ShowState.UNCHANGED


@pytest.mark.asyncio
class TestTrackUntrack:
    async def test_track_fetches_details(self, tracker, scheduler, fake_tmdb, make_show):
        fake_tmdb.routes["tv/42"] = make_show(42, air_date="2025-03-01")

        assert await tracker.track(42) is ShowState.SCHEDULED
        assert fake_tmdb.paths() == ["/3/tv/42"]

    async def test_track_propagates_upstream_errors(self, tracker, scheduler):
        with pytest.raises(UpstreamError) as exc_info:
            await tracker.track(404)
        assert exc_info.value.status_code == 404
        assert await scheduler.get_tba_shows() == []

    async def test_untrack_forgets_show(self, tracker, scheduler, make_show):
        await tracker.sync_show(make_show(42, air_date="2025-03-01"))
        await tracker.untrack(42)

        assert await scheduler.get_all_scheduled() == []
        assert await scheduler.get_show_meta(42) is None
