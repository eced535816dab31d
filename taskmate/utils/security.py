"""Password hashing and session token helpers."""

from datetime import timedelta
from typing import Any, Dict

import bcrypt
import jwt

from ..models.task import utcnow

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash or over-long password
        return False


def create_token(user_id: str, secret: str, algorithm: str, expires_minutes: int) -> str:
    """Sign a session token bound to ``user_id``."""
    now = utcnow()
    payload: Dict[str, Any] = {
        "user": {"id": user_id},
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str) -> Dict[str, Any]:
    """Decode and verify a session token.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired or tampered with
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        options={"require": ["exp"]},
    )
