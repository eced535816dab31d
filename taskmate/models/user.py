"""User account model."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from .task import utcnow


class User(BaseModel):
    """Registered user. ``password_hash`` is a bcrypt hash, never plaintext."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique user identifier")
    username: str = Field(..., min_length=1, description="Unique username")
    email: str = Field(..., min_length=1, description="Unique email address")
    password_hash: str = Field(..., description="Bcrypt password hash")
    created_at: datetime = Field(default_factory=utcnow, description="Registration timestamp")
