"""Tests for application statistics."""

import pytest

from applytrack.tracker.models import ApplicationStatus


class TestComputeStats:
    """Test in-memory stats over guest records."""

    def test_empty_collection_lists_every_status_with_zero(self):
        from applytrack.tracker.analytics import compute_stats

        stats = compute_stats([])

        assert stats.total_applications == 0
        assert [item.status for item in stats.by_status] == list(ApplicationStatus)
        assert all(item.count == 0 for item in stats.by_status)
        assert stats.recent_activity == []


class TestAnalyticsService:
    """Test SQL-backed stats and their agreement with the in-memory version."""

    @pytest.fixture
    async def services(self, tmp_path, clock):
        from applytrack.tracker.analytics import AnalyticsService
        from applytrack.tracker.repository import ApplicationRepository
        from applytrack.tracker.service import ApplicationService

        repo = ApplicationRepository(tmp_path / "test_applications.db")
        await repo.initialize()
        yield ApplicationService(repo, clock=clock), AnalyticsService(repo)
        await repo.close()

    @pytest.mark.asyncio
    async def test_counts_and_recent_activity(self, services, clock):
        applications, analytics = services
        statuses = ["APPLIED", "APPLIED", "SCREENING", "REJECTED", "APPLIED", "OFFER_RECEIVED"]
        for index, status in enumerate(statuses):
            await applications.create(
                "user-1",
                {"company_name": f"Company {index}", "position_title": "Dev", "status": status},
            )
            clock.advance(minutes=1)
        await applications.create("user-2", {"company_name": "Other", "position_title": "Dev"})

        stats = await analytics.stats("user-1")

        assert stats.total_applications == 6
        counts = {item.status: item.count for item in stats.by_status}
        assert counts[ApplicationStatus.APPLIED] == 3
        assert counts[ApplicationStatus.SCREENING] == 1
        assert counts[ApplicationStatus.ACCEPTED] == 0
        assert [item.company_name for item in stats.recent_activity] == [
            "Company 5",
            "Company 4",
            "Company 3",
            "Company 2",
            "Company 1",
        ]

    @pytest.mark.asyncio
    async def test_matches_in_memory_computation(self, services, clock):
        from applytrack.tracker.analytics import compute_stats

        applications, analytics = services
        for index in range(3):
            record = await applications.create(
                "user-1", {"company_name": f"C{index}", "position_title": "Dev"}
            )
            clock.advance(seconds=30)
        await applications.update("user-1", record.id, {"status": "ACCEPTED"})

        from_sql = await analytics.stats("user-1")
        in_memory = compute_stats(await applications.list_all("user-1"))

        assert from_sql.to_dict() == in_memory.to_dict()
