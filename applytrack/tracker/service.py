"""Business logic for the server-side application store.

This module provides:
- Record construction with creation defaults (shared with the local store)
- Partial-update merging that refreshes ``updated_at``
- ApplicationService, the owner-scoped CRUD used by the HTTP API
"""

from __future__ import annotations

import dataclasses
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from applytrack.tracker.errors import NotFoundError
from applytrack.tracker.models import (
    DEFAULT_PRIORITY,
    DEFAULT_REMINDER_DAYS,
    DEFAULT_REMINDER_ENABLED,
    DEFAULT_STATUS,
    Application,
    utc_now,
)
from applytrack.tracker.repository import ApplicationRepository
from applytrack.tracker.schemas import (
    ApplicationCreate,
    ApplicationUpdate,
    validate_create,
    validate_update,
)

Clock = Callable[[], datetime]


def build_application(
    data: ApplicationCreate,
    *,
    application_id: str,
    owner_id: str,
    now: datetime,
) -> Application:
    """Build a new record from a validated payload, filling defaults."""
    return Application(
        id=application_id,
        owner_id=owner_id,
        company_name=data.company_name,
        position_title=data.position_title,
        job_description=data.job_description,
        job_url=data.job_url,
        location_city=data.location_city,
        notes=data.notes,
        salary=data.salary,
        contact_name=data.contact_name,
        contact_email=data.contact_email,
        contact_phone=data.contact_phone,
        status=data.status or DEFAULT_STATUS,
        priority=data.priority or DEFAULT_PRIORITY,
        application_date=data.application_date or now,
        reminder_enabled=(
            DEFAULT_REMINDER_ENABLED
            if data.reminder_enabled is None
            else data.reminder_enabled
        ),
        reminder_days=data.reminder_days or DEFAULT_REMINDER_DAYS,
        last_reminder_ack=now,
        created_at=now,
        updated_at=now,
    )


def merge_changes(record: Application, changes: dict[str, Any], now: datetime) -> Application:
    """Return ``record`` with ``changes`` applied and ``updated_at`` refreshed."""
    ack = changes.get("last_reminder_ack")
    if ack is not None and ack > now:
        # Tolerated client clock skew never moves an acknowledgment past "now".
        changes = {**changes, "last_reminder_ack": now}
    return dataclasses.replace(record, **changes, updated_at=now)


class ApplicationService:
    """Owner-scoped CRUD over the application repository."""

    def __init__(self, repository: ApplicationRepository, clock: Clock = utc_now):
        self.repository = repository
        self._clock = clock

    async def list_all(self, owner_id: str) -> list[Application]:
        return await self.repository.list_for_owner(owner_id)

    async def get_by_id(self, owner_id: str, application_id: str) -> Application:
        """Fetch one record.

        Raises:
            NotFoundError: If the record is absent or owned by someone else.
        """
        record = await self.repository.get(owner_id, application_id)
        if record is None:
            raise NotFoundError()
        return record

    async def create(
        self, owner_id: str, payload: ApplicationCreate | dict[str, Any]
    ) -> Application:
        data = validate_create(payload)
        record = build_application(
            data,
            application_id=str(uuid.uuid4()),
            owner_id=owner_id,
            now=self._clock(),
        )
        await self.repository.insert(record)
        return record

    async def update(
        self,
        owner_id: str,
        application_id: str,
        payload: ApplicationUpdate | dict[str, Any],
    ) -> Application:
        """Apply a partial update.

        Validation happens before the lookup so malformed input never
        reaches storage.
        """
        changes = validate_update(payload).changes()
        record = await self.get_by_id(owner_id, application_id)
        updated = merge_changes(record, changes, self._clock())
        if not await self.repository.update(updated):
            raise NotFoundError()
        return updated

    async def delete(self, owner_id: str, application_id: str) -> None:
        if not await self.repository.delete(owner_id, application_id):
            raise NotFoundError()
