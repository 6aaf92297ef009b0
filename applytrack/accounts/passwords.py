"""Password and session-token hashing."""

import hashlib

import bcrypt

DEFAULT_ROUNDS = 12

# bcrypt only reads this many bytes of the secret.
MAX_PASSWORD_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    return bcrypt.hashpw(_secret(password), bcrypt.gensalt(rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_secret(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()
