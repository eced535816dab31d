"""Domain models for the task management system."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Task status enumeration."""
    PENDING = "pending"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(BaseModel):
    """Task domain model, always owned by exactly one user."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique task identifier")
    user_id: str = Field(..., description="Owning user identifier")
    title: str = Field(..., min_length=1, max_length=200, description="Task title")
    description: str = Field(default="", max_length=2000, description="Task description")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Task status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    due_date: Optional[datetime] = Field(default=None, description="Optional due date")
    reminders: List[datetime] = Field(default_factory=list, description="Reminder timestamps")
    created_at: datetime = Field(default_factory=utcnow, description="Task creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Task last update timestamp")

    def update_timestamp(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Whether a pending task's due date has passed."""
        if self.status != TaskStatus.PENDING or self.due_date is None:
            return False
        now = now or utcnow()
        due = self.due_date
        if due.tzinfo is None:
            due = due.replace(tzinfo=timezone.utc)
        return due < now
