"""Account registration, login and session management."""

from __future__ import annotations

import asyncio
import secrets
import sqlite3
import uuid
from datetime import timedelta
from typing import Any

from applytrack.accounts.models import (
    AuthResponse,
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    User,
)
from applytrack.accounts.passwords import (
    DEFAULT_ROUNDS,
    hash_password,
    hash_token,
    verify_password,
)
from applytrack.accounts.repository import AccountRepository
from applytrack.tracker.errors import ConflictError, UnauthenticatedError, ValidationError
from applytrack.tracker.models import utc_now
from applytrack.tracker.service import Clock
from applytrack.utils.logging import get_logger

logger = get_logger("accounts")

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Issues and resolves opaque bearer tokens for registered accounts."""

    def __init__(
        self,
        repository: AccountRepository,
        *,
        token_ttl: timedelta = timedelta(days=7),
        hash_rounds: int = DEFAULT_ROUNDS,
        clock: Clock = utc_now,
    ):
        self.repository = repository
        self.token_ttl = token_ttl
        self.hash_rounds = hash_rounds
        self._clock = clock

    async def _hash(self, password: str) -> str:
        # bcrypt is CPU-bound; keep it off the event loop.
        return await asyncio.to_thread(hash_password, password, self.hash_rounds)

    async def _issue(self, user: User) -> AuthResponse:
        token = secrets.token_urlsafe(32)
        now = self._clock()
        expires_at = now + self.token_ttl
        await self.repository.insert_session(
            token_hash=hash_token(token),
            user_id=user.id,
            now=now,
            expires_at=expires_at,
        )
        return AuthResponse(user=user, token=token, expires_at=expires_at)

    async def register(self, request: RegisterRequest) -> AuthResponse:
        """Create an account and sign it in.

        Raises:
            ConflictError: If the email is already registered.
        """
        if await self.repository.get_credentials(request.email) is not None:
            raise ConflictError()

        user_id = str(uuid.uuid4())
        try:
            await self.repository.insert_user(
                user_id=user_id,
                email=request.email,
                password_hash=await self._hash(request.password),
                first_name=request.first_name,
                last_name=request.last_name,
                now=self._clock(),
            )
        except sqlite3.IntegrityError as exc:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError() from exc

        logger.info("Registered account %s", user_id)
        return await self._issue(await self.get_profile(user_id))

    async def login(self, request: LoginRequest) -> AuthResponse:
        """Exchange email and password for a session token.

        Raises:
            UnauthenticatedError: For an unknown email or a wrong password
                (the two are not distinguished).
        """
        credentials = await self.repository.get_credentials(request.email)
        if credentials is None:
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        user_id, password_hash = credentials
        valid = await asyncio.to_thread(verify_password, request.password, password_hash)
        if not valid:
            logger.info("Rejected login for account %s", user_id)
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        return await self._issue(await self.get_profile(user_id))

    async def authenticate(self, token: str | None) -> User:
        """Resolve a bearer token to its account.

        Raises:
            UnauthenticatedError: If the token is missing, unknown, expired
                or revoked.
        """
        if not token:
            raise UnauthenticatedError()
        user_id = await self.repository.resolve_session(hash_token(token), self._clock())
        if user_id is None:
            raise UnauthenticatedError("Invalid or expired token")
        user = await self.repository.get_user(user_id)
        if user is None:
            raise UnauthenticatedError("Invalid or expired token")
        return user

    async def logout(self, token: str) -> None:
        await self.repository.revoke_session(hash_token(token), self._clock())

    async def get_profile(self, user_id: str) -> User:
        user = await self.repository.get_user(user_id)
        if user is None:
            raise UnauthenticatedError("User not found")
        return user

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> User:
        changes: dict[str, Any] = update.changes()
        if changes:
            await self.repository.update_profile(user_id, changes, self._clock())
        return await self.get_profile(user_id)

    async def change_password(
        self, user_id: str, change: PasswordChange, *, current_token: str | None = None
    ) -> None:
        """Replace the password after checking the current one.

        Every other session of the account is revoked; the session making
        the change stays valid.

        Raises:
            ValidationError: If the current password does not match.
        """
        password_hash = await self.repository.get_password_hash(user_id)
        if password_hash is None:
            raise UnauthenticatedError("User not found")
        valid = await asyncio.to_thread(
            verify_password, change.current_password, password_hash
        )
        if not valid:
            raise ValidationError(
                "Invalid current password",
                details=[{"field": "current_password", "message": "does not match"}],
            )

        now = self._clock()
        await self.repository.update_password_hash(
            user_id, await self._hash(change.new_password), now
        )
        await self.repository.revoke_user_sessions(
            user_id,
            now,
            keep_token_hash=hash_token(current_token) if current_token else None,
        )
        logger.info("Changed password for account %s", user_id)
