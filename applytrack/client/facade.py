"""One application-store interface for every caller, whatever the mode."""

from __future__ import annotations

from typing import Any, Protocol

from applytrack.client.session import SessionManager
from applytrack.tracker.models import Application
from applytrack.tracker.schemas import ApplicationCreate, ApplicationUpdate


class ApplicationStore(Protocol):
    """The CRUD capability both stores provide."""

    async def list_all(self) -> list[Application]: ...

    async def get_by_id(self, application_id: str) -> Application: ...

    async def create(self, payload: ApplicationCreate | dict[str, Any]) -> Application: ...

    async def update(
        self, application_id: str, payload: ApplicationUpdate | dict[str, Any]
    ) -> Application: ...

    async def delete(self, application_id: str) -> None: ...


class ApplicationFacade:
    """Routes each call to the local or remote store.

    The session mode is read on every call, so switching from guest to a
    registered account takes effect on the very next operation.
    """

    def __init__(
        self,
        session: SessionManager,
        local: ApplicationStore,
        remote: ApplicationStore,
    ):
        self.session = session
        self.local = local
        self.remote = remote

    def store(self) -> ApplicationStore:
        return self.local if self.session.current().is_guest else self.remote

    async def list_all(self) -> list[Application]:
        return await self.store().list_all()

    async def get_by_id(self, application_id: str) -> Application:
        return await self.store().get_by_id(application_id)

    async def create(self, payload: ApplicationCreate | dict[str, Any]) -> Application:
        return await self.store().create(payload)

    async def update(
        self, application_id: str, payload: ApplicationUpdate | dict[str, Any]
    ) -> Application:
        return await self.store().update(application_id, payload)

    async def delete(self, application_id: str) -> None:
        await self.store().delete(application_id)
