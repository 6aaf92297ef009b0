"""Guest-mode application store backed by local storage.

The whole collection lives under one key as a JSON list and is rewritten
on every mutation. An ``asyncio.Lock`` serializes the read-modify-write
cycles so concurrent tasks cannot interleave them.
"""

from __future__ import annotations

import asyncio
import secrets
import time
from collections.abc import Iterable
from typing import Any

from applytrack.client.storage import GUEST_APPLICATIONS_KEY, LocalStorage
from applytrack.tracker.errors import NotFoundError
from applytrack.tracker.models import (
    DEFAULT_REMINDER_DAYS,
    DEFAULT_REMINDER_ENABLED,
    GUEST_OWNER_ID,
    Application,
    utc_now,
)
from applytrack.tracker.schemas import (
    ApplicationCreate,
    ApplicationUpdate,
    validate_create,
    validate_update,
)
from applytrack.tracker.service import Clock, build_application, merge_changes
from applytrack.utils.logging import get_logger

logger = get_logger("client.local_store")

SCHEMA_VERSION_KEY = "guest-applications:schema"
SCHEMA_VERSION = 2


def generate_local_id() -> str:
    return f"app_{time.time_ns()}_{secrets.token_hex(5)}"


def _backfill_reminder_fields(items: list[dict[str, Any]]) -> bool:
    """Version 1 -> 2: records written before reminders existed."""
    changed = False
    for item in items:
        if item.get("reminder_enabled") is None:
            item["reminder_enabled"] = DEFAULT_REMINDER_ENABLED
            changed = True
        if item.get("reminder_days") is None:
            item["reminder_days"] = DEFAULT_REMINDER_DAYS
            changed = True
        if not item.get("last_reminder_ack"):
            item["last_reminder_ack"] = item.get("updated_at")
            changed = True
    return changed


# Upgrade steps keyed by the version they upgrade *from*.
MIGRATIONS = {1: _backfill_reminder_fields}


class LocalApplicationStore:
    """CRUD over guest applications held in local storage."""

    def __init__(self, storage: LocalStorage, clock: Clock = utc_now):
        self.storage = storage
        self._clock = clock
        self._lock = asyncio.Lock()
        self._initialized = False

    async def initialize(self) -> None:
        """Bring stored records up to the current schema version.

        Runs at most once per store instance; the stored version key makes
        it a no-op on data that is already current.
        """
        async with self._lock:
            self._migrate()

    def _migrate(self) -> None:
        if self._initialized:
            return
        version = int(self.storage.get_item(SCHEMA_VERSION_KEY, 1))
        items = self._load_raw()
        changed = False
        while version < SCHEMA_VERSION:
            step = MIGRATIONS[version]
            changed = step(items) or changed
            version += 1
            logger.debug("Upgraded guest applications to schema v%s", version)
        if changed:
            self._save_raw(items)
        self.storage.set_item(SCHEMA_VERSION_KEY, SCHEMA_VERSION)
        self._initialized = True

    def _load_raw(self) -> list[dict[str, Any]]:
        data = self.storage.get_item(GUEST_APPLICATIONS_KEY)
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]

    def _save_raw(self, items: list[dict[str, Any]]) -> None:
        self.storage.set_item(GUEST_APPLICATIONS_KEY, items)

    @staticmethod
    def _parse(items: Iterable[dict[str, Any]]) -> list[Application]:
        records = []
        for item in items:
            try:
                records.append(Application.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed guest record %r: %s", item.get("id"), exc)
        return records

    async def list_all(self) -> list[Application]:
        """Return every record in storage order."""
        async with self._lock:
            self._migrate()
            return self._parse(self._load_raw())

    async def get_by_id(self, application_id: str) -> Application:
        """Fetch one record.

        Raises:
            NotFoundError: If no record has that id.
        """
        for record in await self.list_all():
            if record.id == application_id:
                return record
        raise NotFoundError()

    async def create(self, payload: ApplicationCreate | dict[str, Any]) -> Application:
        data = validate_create(payload)
        async with self._lock:
            self._migrate()
            record = build_application(
                data,
                application_id=generate_local_id(),
                owner_id=GUEST_OWNER_ID,
                now=self._clock(),
            )
            items = self._load_raw()
            items.append(record.to_dict())
            self._save_raw(items)
        return record

    async def update(
        self, application_id: str, payload: ApplicationUpdate | dict[str, Any]
    ) -> Application:
        """Merge the supplied fields over an existing record.

        Raises:
            NotFoundError: If no record has that id.
        """
        changes = validate_update(payload).changes()
        async with self._lock:
            self._migrate()
            items = self._load_raw()
            for index, item in enumerate(items):
                if item.get("id") == application_id:
                    break
            else:
                raise NotFoundError()
            try:
                record = Application.from_dict(items[index])
            except (KeyError, TypeError, ValueError) as exc:
                # Unreadable records are invisible to list_all and get_by_id too.
                logger.warning(
                    "Refusing to update malformed guest record %r: %s", application_id, exc
                )
                raise NotFoundError() from exc
            updated = merge_changes(record, changes, self._clock())
            items[index] = updated.to_dict()
            self._save_raw(items)
        return updated

    async def delete(self, application_id: str) -> None:
        """Remove a record; deleting a missing id is not an error."""
        await self.remove_many([application_id])

    async def remove_many(self, application_ids: Iterable[str]) -> int:
        """Remove every record whose id is listed; return how many went."""
        doomed = set(application_ids)
        async with self._lock:
            self._migrate()
            items = self._load_raw()
            kept = [item for item in items if item.get("id") not in doomed]
            removed = len(items) - len(kept)
            if removed:
                self._save_raw(kept)
        return removed

    async def clear(self) -> None:
        async with self._lock:
            self.storage.remove_item(GUEST_APPLICATIONS_KEY)
