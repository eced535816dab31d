"""Registration and login routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_auth_service
from ..exceptions import TaskmateError
from ..schemas import AuthResponse, LoginRequest, RegisterRequest
from ..services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# Plain ``def`` routes: bcrypt hashing runs in the threadpool, off the event loop.


@router.post("/register", response_model=AuthResponse)
def register(
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register a new user and return a session token.

    Raises:
        ValidationError: If a field is empty
        ConflictError: If the username or email is taken
    """
    try:
        logger.info(f"Registering user: {data.username}")

        result = auth_service.register(data.username, data.email, data.password)

        return AuthResponse(token=result.token, user_id=result.user_id, username=result.username)

    except TaskmateError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error during registration"
        )


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Authenticate by username or email and return a session token.

    Raises:
        InvalidCredentialsError: If the credentials do not match
    """
    try:
        result = auth_service.login(data.email_or_username, data.password)

        return AuthResponse(token=result.token, user_id=result.user_id, username=result.username)

    except TaskmateError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error during login"
        )
