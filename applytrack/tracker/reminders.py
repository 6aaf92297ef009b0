"""Follow-up reminder evaluation.

A record is due when reminders are enabled, its status is not terminal
(REJECTED/WITHDRAWN) and ``last_reminder_ack + reminder_days`` has been
reached. The boundary is inclusive.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from applytrack.tracker.models import (
    TERMINAL_REMINDER_STATUSES,
    Application,
    DueReminder,
    utc_now,
)
from applytrack.tracker.schemas import ApplicationUpdate
from applytrack.tracker.service import ApplicationService, Clock


def due_at(record: Application) -> datetime:
    """When the record's next reminder falls due."""
    return record.last_reminder_ack + timedelta(days=record.reminder_days)


def is_due(record: Application, now: datetime) -> bool:
    if not record.reminder_enabled:
        return False
    if record.status in TERMINAL_REMINDER_STATUSES:
        return False
    return now >= due_at(record)


def find_due_reminders(
    records: Iterable[Application], now: datetime
) -> list[DueReminder]:
    """Project every due record to its reminder view."""
    return [DueReminder.from_application(record) for record in records if is_due(record, now)]


class ReminderService:
    """Server-side reminder listing and acknowledgment."""

    def __init__(self, applications: ApplicationService, clock: Clock = utc_now):
        self.applications = applications
        self._clock = clock

    async def due(self, owner_id: str) -> list[DueReminder]:
        records = await self.applications.list_all(owner_id)
        return find_due_reminders(records, self._clock())

    async def acknowledge(self, owner_id: str, application_id: str) -> None:
        """Reset the reminder cadence for one record.

        Raises:
            NotFoundError: If the record is absent or owned by someone else.
        """
        await self.applications.update(
            owner_id,
            application_id,
            ApplicationUpdate(last_reminder_ack=self._clock()),
        )
