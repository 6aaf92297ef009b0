"""Account-mode application store backed by the HTTP API.

Ownership is decided server-side from the bearer token; the client never
sends an owner id. Error responses are mapped back onto the same domain
exceptions the local store raises.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from applytrack.tracker.errors import (
    ERRORS_BY_STATUS,
    NotFoundError,
    TrackerError,
    UnexpectedError,
    ValidationError,
)
from applytrack.tracker.models import Application
from applytrack.tracker.schemas import (
    ApplicationCreate,
    ApplicationUpdate,
    validate_create,
    validate_update,
)
from applytrack.utils.logging import get_logger

logger = get_logger("client.remote")

TokenProvider = Callable[[], str | None]


def error_from_response(response: httpx.Response) -> TrackerError:
    """Translate an error response into a domain exception."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    message = body.get("error") if isinstance(body, dict) else None
    if not isinstance(message, str):
        message = None

    error_class = ERRORS_BY_STATUS.get(response.status_code)
    if error_class is ValidationError:
        return ValidationError(message, details=body.get("details") or [])
    if error_class is not None:
        return error_class(message)
    return UnexpectedError(message or f"Server responded with {response.status_code}")


class ApiClient:
    """Thin async wrapper around ``httpx.AsyncClient``.

    Every request carries an explicit timeout. ``transport`` lets tests
    route requests straight into an ASGI app.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token_provider: TokenProvider = lambda: None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._token_provider = token_provider

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        authenticated: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body (None for 204).

        Raises:
            TrackerError: Mapped from the response status, or
                UnexpectedError for transport failures and timeouts.
        """
        headers = {}
        if authenticated:
            token = self._token_provider()
            if token:
                headers["authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as exc:
            raise UnexpectedError(f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise UnexpectedError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= 400:
            raise error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)


class RemoteApplicationStore:
    """The application store contract, served by the HTTP API."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def list_all(self) -> list[Application]:
        data = await self.api.get("/applications")
        return [Application.from_dict(item) for item in data]

    async def get_by_id(self, application_id: str) -> Application:
        return Application.from_dict(await self.api.get(f"/applications/{application_id}"))

    async def create(self, payload: ApplicationCreate | dict[str, Any]) -> Application:
        data = validate_create(payload)
        body = data.model_dump(mode="json", exclude_unset=True)
        return Application.from_dict(await self.api.post("/applications", json=body))

    async def update(
        self, application_id: str, payload: ApplicationUpdate | dict[str, Any]
    ) -> Application:
        data = validate_update(payload)
        body = data.model_dump(mode="json", exclude_unset=True)
        return Application.from_dict(
            await self.api.put(f"/applications/{application_id}", json=body)
        )

    async def delete(self, application_id: str) -> None:
        """Delete a record; an already-missing record is not an error."""
        try:
            await self.api.delete(f"/applications/{application_id}")
        except NotFoundError:
            logger.debug("Application %s was already gone", application_id)
