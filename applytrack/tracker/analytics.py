"""Aggregate statistics over an owner's applications."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from applytrack.tracker.models import (
    Application,
    ApplicationStats,
    ApplicationStatus,
    RecentActivity,
    StatusCount,
)
from applytrack.tracker.repository import ApplicationRepository

RECENT_ACTIVITY_LIMIT = 5


def _recent(record: Application) -> RecentActivity:
    return RecentActivity(
        id=record.id,
        company_name=record.company_name,
        position_title=record.position_title,
        status=record.status,
        updated_at=record.updated_at,
    )


def _by_status(counts: dict[ApplicationStatus, int]) -> list[StatusCount]:
    return [StatusCount(status=status, count=counts.get(status, 0)) for status in ApplicationStatus]


def compute_stats(records: Iterable[Application]) -> ApplicationStats:
    """Compute stats in memory (used for guest data)."""
    records = list(records)
    counts = Counter(record.status for record in records)
    recent = sorted(records, key=lambda record: record.updated_at, reverse=True)
    return ApplicationStats(
        total_applications=len(records),
        by_status=_by_status(counts),
        recent_activity=[_recent(record) for record in recent[:RECENT_ACTIVITY_LIMIT]],
    )


class AnalyticsService:
    """Stats computed with SQL aggregates for the server store."""

    def __init__(self, repository: ApplicationRepository):
        self.repository = repository

    async def stats(self, owner_id: str) -> ApplicationStats:
        counts = await self.repository.get_status_counts(owner_id)
        recent = await self.repository.list_recent(owner_id, limit=RECENT_ACTIVITY_LIMIT)
        return ApplicationStats(
            total_applications=sum(counts.values()),
            by_status=_by_status(counts),
            recent_activity=[_recent(record) for record in recent],
        )
