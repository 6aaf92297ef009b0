"""Client side of ApplyTrack: guest storage, API access and the store facade.

Public API:
- open_client: Async context manager wiring every client component together
- ClientContext: The wired components
- ApplicationFacade: Mode-independent CRUD entry point
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from applytrack.client.accounts import AccountClient
from applytrack.client.facade import ApplicationFacade
from applytrack.client.local_store import LocalApplicationStore
from applytrack.client.reminders import ReminderClient
from applytrack.client.remote_store import ApiClient, RemoteApplicationStore
from applytrack.client.session import SessionManager
from applytrack.client.storage import LocalStorage
from applytrack.config.settings import Settings


@dataclass
class ClientContext:
    storage: LocalStorage
    session: SessionManager
    api: ApiClient
    local: LocalApplicationStore
    remote: RemoteApplicationStore
    facade: ApplicationFacade
    reminders: ReminderClient
    accounts: AccountClient


@asynccontextmanager
async def open_client(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[ClientContext]:
    """Build the client components for one session of work.

    Args:
        settings: Supplies the local storage path, API URL and timeout.
        transport: Optional httpx transport (tests route it into the app).
    """
    storage = LocalStorage(settings.local_storage_path)
    session = SessionManager(storage)
    local = LocalApplicationStore(storage)
    await local.initialize()

    async with ApiClient(
        settings.api_base_url,
        token_provider=lambda: session.current().token,
        timeout=settings.request_timeout_seconds,
        transport=transport,
    ) as api:
        remote = RemoteApplicationStore(api)
        facade = ApplicationFacade(session, local, remote)
        yield ClientContext(
            storage=storage,
            session=session,
            api=api,
            local=local,
            remote=remote,
            facade=facade,
            reminders=ReminderClient(facade),
            accounts=AccountClient(api, session, facade, local),
        )


__all__ = ["ApplicationFacade", "ClientContext", "open_client"]
