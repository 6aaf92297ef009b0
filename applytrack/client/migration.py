"""Copy guest applications into a freshly registered account.

Only creation-relevant fields travel; every migrated record gets a new
server id, new timestamps and default reminder state. A record that fails
to migrate is logged and left in local storage; the ones that made it are
removed, so a fully successful run leaves the guest collection empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from applytrack.client.facade import ApplicationStore
from applytrack.client.local_store import LocalApplicationStore
from applytrack.tracker.errors import TrackerError
from applytrack.tracker.models import Application
from applytrack.tracker.schemas import MIGRATED_FIELDS
from applytrack.utils.logging import get_logger

logger = get_logger("client.migration")


@dataclass
class MigrationReport:
    migrated: dict[str, str] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failed


def creation_payload(record: Application) -> dict[str, object]:
    """Project a guest record down to the fields a new account receives."""
    payload: dict[str, object] = {}
    for name in MIGRATED_FIELDS:
        value = getattr(record, name)
        if value is not None:
            payload[name] = value
    return payload


async def migrate_guest_applications(
    records: list[Application],
    target: ApplicationStore,
    local: LocalApplicationStore,
) -> MigrationReport:
    """Create each captured guest record in ``target``.

    Args:
        records: Guest records captured before registration.
        target: Where to create them (the facade, now routed to the server).
        local: The guest store to prune once records are migrated.

    Returns:
        Which local ids were migrated (to their new ids) and which failed.
    """
    report = MigrationReport()
    for record in records:
        try:
            created = await target.create(creation_payload(record))
        except TrackerError as exc:
            logger.error("Failed to migrate application %s: %s", record.id, exc)
            report.failed[record.id] = str(exc)
            continue
        report.migrated[record.id] = created.id

    if report.migrated:
        await local.remove_many(report.migrated)
    logger.info(
        "Migrated %d guest application(s), %d failed",
        len(report.migrated),
        len(report.failed),
    )
    return report
