"""Domain exceptions for the task management API.

Every error raised by the services carries the HTTP status it maps to, so the
exception handlers in ``main.create_app`` can render a JSON body without
knowing about individual error types.
"""

from fastapi import status


class TaskmateError(Exception):
    """Base class for all application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskmateError):
    """Malformed or missing required input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation Error"


class ConflictError(TaskmateError):
    """Username or email already registered."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists"


class InvalidCredentialsError(TaskmateError):
    """Login identifier or password did not match."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid Credentials"


class UnauthorizedError(TaskmateError):
    """Missing, malformed, expired or tampered session token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token is not valid"


class ForbiddenError(TaskmateError):
    """The resource exists but belongs to another user."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "User not authorized"


class NotFoundError(TaskmateError):
    """The requested resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Task not found"


class UpstreamThrottledError(TaskmateError):
    """The language model kept throttling after all retries."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "AI service is rate limited, please try again later"


class ConfigurationError(TaskmateError):
    """A required server-side setting is missing."""

    default_message = "AI service not configured: API key missing."


class ProviderError(TaskmateError):
    """The language model failed for a reason other than throttling."""

    default_message = "Failed to get suggestions from AI."
