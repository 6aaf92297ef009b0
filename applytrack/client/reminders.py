"""Client-side reminder listing and acknowledgment, through the facade."""

from __future__ import annotations

from applytrack.client.facade import ApplicationFacade
from applytrack.tracker.models import DueReminder, utc_now
from applytrack.tracker.reminders import find_due_reminders
from applytrack.tracker.schemas import ApplicationUpdate
from applytrack.tracker.service import Clock
from applytrack.utils.logging import get_logger

logger = get_logger("client.reminders")


class ReminderClient:
    """Works the same in guest and account mode."""

    def __init__(self, facade: ApplicationFacade, clock: Clock = utc_now):
        self.facade = facade
        self._clock = clock

    async def due(self) -> list[DueReminder]:
        records = await self.facade.list_all()
        return find_due_reminders(records, self._clock())

    async def poll(self) -> list[DueReminder]:
        """Best-effort variant of ``due`` for background refreshes."""
        try:
            return await self.due()
        except Exception:
            logger.warning("Reminder poll failed", exc_info=True)
            return []

    async def acknowledge(self, application_id: str) -> None:
        """Restart the cadence for one application.

        Raises:
            NotFoundError: If the id does not exist (in either mode).
        """
        await self.facade.update(
            application_id, ApplicationUpdate(last_reminder_ack=self._clock())
        )
