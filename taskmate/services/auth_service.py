"""Authentication service: registration, login and token verification."""

import logging
from dataclasses import dataclass
from typing import Optional

import jwt

from ..config import Settings
from ..exceptions import (
    ConflictError,
    InvalidCredentialsError,
    UnauthorizedError,
    ValidationError,
)
from ..models.user import User
from ..storage import UserStore
from ..utils.logging import log_user_action
from ..utils.security import (
    BCRYPT_MAX_BYTES,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Outcome of a successful register or login."""
    token: str
    user_id: str
    username: str


class AuthService:
    """Stateless authentication on top of the credential store."""

    def __init__(self, settings: Settings, user_store: UserStore):
        """Initialize the auth service.

        Args:
            settings: Application settings holding the JWT configuration
            user_store: Credential store
        """
        self.settings = settings
        self.users = user_store
        logger.info("Auth service initialized")

    def register(self, username: str, email: str, password: str) -> AuthResult:
        """Register a new user and issue a session token.

        Args:
            username: Desired username, unique
            email: Email address, unique
            password: Plaintext password, hashed before storage

        Returns:
            Token and identity of the new user

        Raises:
            ValidationError: If a field is empty or the password is too long
            ConflictError: If the email or username is already registered
        """
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            raise ValidationError("Username, email and password are required")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")

        if self.users.find_by_email(email):
            raise ConflictError("User with this email already exists")
        if self.users.find_by_username(username):
            raise ConflictError("User with this username already exists")

        user = User(username=username, email=email, password_hash=hash_password(password))
        try:
            user = self.users.add(user)
        except KeyError as e:
            # Lost a race with a concurrent registration
            raise ConflictError(f"User with this {e.args[0]} already exists")

        logger.info(f"Registered user {user.id}: {user.username}")
        log_user_action(user.id, "register", {"username": user.username})
        return AuthResult(token=self.issue_token(user.id), user_id=user.id, username=user.username)

    def login(self, identifier: str, password: str) -> AuthResult:
        """Authenticate by username or email.

        Raises:
            InvalidCredentialsError: If no user matches or the password is wrong
        """
        identifier = (identifier or "").strip()
        if not identifier or not password:
            raise InvalidCredentialsError()

        user = self.users.find_by_identifier(identifier)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise InvalidCredentialsError()

        log_user_action(user.id, "login")
        return AuthResult(token=self.issue_token(user.id), user_id=user.id, username=user.username)

    def issue_token(self, user_id: str) -> str:
        return create_token(
            user_id,
            self.settings.jwt_secret,
            self.settings.jwt_algorithm,
            self.settings.jwt_expires_minutes,
        )

    def verify_token(self, token: Optional[str]) -> str:
        """Resolve a session token to the user id it is bound to.

        Raises:
            UnauthorizedError: If the token is absent, malformed, expired or tampered with
        """
        if not token:
            raise UnauthorizedError("No token, authorization denied")

        try:
            payload = decode_token(token, self.settings.jwt_secret, self.settings.jwt_algorithm)
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Token is not valid")

        user = payload.get("user")
        user_id = user.get("id") if isinstance(user, dict) else None
        if not isinstance(user_id, str) or not user_id:
            raise UnauthorizedError("Token is not valid")
        return user_id


# Global auth service instance - will be initialized during app startup
_auth_service: Optional[AuthService] = None


def get_auth_service() -> Optional[AuthService]:
    """Get the global auth service instance."""
    return _auth_service


def initialize_auth_service(settings: Settings, user_store: UserStore) -> AuthService:
    """Initialize the global auth service instance."""
    global _auth_service
    _auth_service = AuthService(settings, user_store)
    return _auth_service
