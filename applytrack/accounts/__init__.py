"""Accounts, credentials and session tokens.

Public API:
- AuthService: Registration, login, token resolution and profile management
- AccountRepository: Async SQLite store for users and sessions
- User / AuthResponse: Account data returned to callers
"""

from applytrack.accounts.models import AuthResponse, User
from applytrack.accounts.repository import AccountRepository
from applytrack.accounts.service import AuthService

__all__ = ["AccountRepository", "AuthResponse", "AuthService", "User"]
