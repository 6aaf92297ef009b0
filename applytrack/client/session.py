"""Client session state: guest or signed-in.

The session is an explicit object handed to whatever needs it; it is
persisted under the ``auth-storage`` key so a CLI invocation can pick up
where the previous one left off.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from applytrack.client.storage import AUTH_STORAGE_KEY, GUEST_APPLICATIONS_KEY, LocalStorage

GUEST_TOKEN = "guest-token"


class SessionMode(str, Enum):
    ANONYMOUS = "anonymous"
    GUEST = "guest"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionContext:
    """Who the client is acting as right now."""

    mode: SessionMode = SessionMode.ANONYMOUS
    user_id: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    token: str | None = None

    @property
    def is_guest(self) -> bool:
        return self.mode == SessionMode.GUEST

    @property
    def is_authenticated(self) -> bool:
        return self.mode == SessionMode.AUTHENTICATED

    @property
    def display_name(self) -> str:
        names = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(names) or (self.email or "anonymous")

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionContext:
        return cls(
            mode=SessionMode(data.get("mode", SessionMode.ANONYMOUS.value)),
            user_id=data.get("user_id"),
            email=data.get("email"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            token=data.get("token"),
        )


def _guest_id() -> str:
    return f"guest_{time.time_ns()}_{secrets.token_hex(5)}"


class SessionManager:
    """Owns the lifetime of the persisted session."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def current(self) -> SessionContext:
        data = self.storage.get_item(AUTH_STORAGE_KEY)
        if not isinstance(data, dict):
            return SessionContext()
        try:
            return SessionContext.from_dict(data)
        except ValueError:
            return SessionContext()

    def _save(self, context: SessionContext) -> SessionContext:
        self.storage.set_item(AUTH_STORAGE_KEY, context.to_dict())
        return context

    def start_guest(self) -> SessionContext:
        return self._save(
            SessionContext(
                mode=SessionMode.GUEST,
                user_id=_guest_id(),
                email="guest@local",
                first_name="Guest",
                last_name="User",
                token=GUEST_TOKEN,
            )
        )

    def sign_in(
        self,
        *,
        user_id: str,
        email: str,
        token: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> SessionContext:
        return self._save(
            SessionContext(
                mode=SessionMode.AUTHENTICATED,
                user_id=user_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                token=token,
            )
        )

    def sign_out(self, clear_guest_data: bool = False) -> None:
        """End the session, optionally discarding guest applications too."""
        if clear_guest_data:
            self.storage.remove_item(GUEST_APPLICATIONS_KEY)
        self.storage.remove_item(AUTH_STORAGE_KEY)
