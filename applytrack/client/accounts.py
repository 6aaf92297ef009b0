"""Sign-in, registration and profile calls from the client."""

from __future__ import annotations

from typing import Any

from applytrack.accounts.models import AuthResponse, User
from applytrack.client.facade import ApplicationFacade
from applytrack.client.local_store import LocalApplicationStore
from applytrack.client.migration import MigrationReport, migrate_guest_applications
from applytrack.client.remote_store import ApiClient
from applytrack.client.session import SessionManager
from applytrack.tracker.errors import TrackerError
from applytrack.utils.logging import get_logger

logger = get_logger("client.accounts")


class AccountClient:
    """Drives the session through login, registration and logout."""

    def __init__(
        self,
        api: ApiClient,
        session: SessionManager,
        facade: ApplicationFacade,
        local: LocalApplicationStore,
    ):
        self.api = api
        self.session = session
        self.facade = facade
        self.local = local

    def _sign_in(self, response: AuthResponse) -> None:
        user = response.user
        self.session.sign_in(
            user_id=user.id,
            email=user.email,
            token=response.token,
            first_name=user.first_name,
            last_name=user.last_name,
        )

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self.api.post(
            "/auth/login",
            json={"email": email, "password": password},
            authenticated=False,
        )
        response = AuthResponse.from_dict(data)
        self._sign_in(response)
        return response

    async def register(
        self,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> tuple[AuthResponse, MigrationReport | None]:
        """Create an account, sign in, and carry guest data across.

        Guest records are captured before the account exists. Migration is
        best-effort: its failures are logged and never fail registration.

        Returns:
            The auth response and, if the session was a guest session with
            data, the migration report.
        """
        was_guest = self.session.current().is_guest
        captured = await self.local.list_all() if was_guest else []

        body: dict[str, Any] = {"email": email, "password": password}
        if first_name is not None:
            body["first_name"] = first_name
        if last_name is not None:
            body["last_name"] = last_name
        data = await self.api.post("/auth/register", json=body, authenticated=False)
        response = AuthResponse.from_dict(data)
        self._sign_in(response)

        report = None
        if captured:
            report = await migrate_guest_applications(captured, self.facade, self.local)
        return response, report

    async def logout(self, clear_guest_data: bool = False) -> None:
        """End the session; for accounts the token is revoked server-side too."""
        context = self.session.current()
        if context.is_authenticated:
            try:
                await self.api.post("/auth/logout")
            except TrackerError:
                logger.warning("Token revocation failed; discarding it locally", exc_info=True)
        self.session.sign_out(clear_guest_data=clear_guest_data)

    async def get_profile(self) -> User:
        data = await self.api.get("/auth/me")
        return User.from_dict(data["user"])

    async def update_profile(self, **changes: Any) -> User:
        data = await self.api.put("/auth/profile", json=changes)
        user = User.from_dict(data["user"])
        context = self.session.current()
        if context.is_authenticated and context.token:
            self.session.sign_in(
                user_id=user.id,
                email=user.email,
                token=context.token,
                first_name=user.first_name,
                last_name=user.last_name,
            )
        return user

    async def change_password(self, current_password: str, new_password: str) -> str:
        data = await self.api.put(
            "/auth/password",
            json={"current_password": current_password, "new_password": new_password},
        )
        return data["message"]
