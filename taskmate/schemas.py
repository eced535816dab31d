"""API request/response schemas for the task management system.

Wire names are camelCase (``dueDate``, ``userId``...); Python code uses the
snake_case field names.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models.task import TaskPriority, TaskStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# Auth-related schemas
class RegisterRequest(_CamelModel):
    """Schema for user registration."""
    username: str = Field(..., min_length=1, max_length=100, description="Unique username")
    email: str = Field(..., min_length=1, max_length=254, description="Unique email address")
    password: str = Field(..., min_length=1, description="Plaintext password")


class LoginRequest(_CamelModel):
    """Schema for login by username or email."""
    email_or_username: str = Field(..., alias="emailOrUsername", description="Username or email")
    password: str = Field(..., description="Plaintext password")


class AuthResponse(_CamelModel):
    """Schema for register/login responses."""
    token: str = Field(..., description="Session token for the x-auth-token header")
    user_id: str = Field(..., alias="userId", description="Authenticated user identifier")
    username: str = Field(..., description="Authenticated username")


# Task-related schemas
class TaskCreate(_CamelModel):
    """Schema for creating a new task."""
    title: str = Field(..., min_length=1, max_length=200, description="Task title")
    description: Optional[str] = Field(None, max_length=2000, description="Task description")
    priority: Optional[TaskPriority] = Field(None, description="Task priority")
    due_date: Optional[datetime] = Field(None, alias="dueDate", description="Optional due date")
    reminders: Optional[List[datetime]] = Field(None, description="Reminder timestamps")


class TaskUpdate(_CamelModel):
    """Schema for updating an existing task.

    Only fields present in the request body are applied; an explicit
    ``dueDate: null`` clears the due date.
    """
    title: Optional[str] = Field(None, max_length=200, description="Task title")
    description: Optional[str] = Field(None, max_length=2000, description="Task description")
    status: Optional[TaskStatus] = Field(None, description="Task status")
    priority: Optional[TaskPriority] = Field(None, description="Task priority")
    due_date: Optional[datetime] = Field(None, alias="dueDate", description="Optional due date")
    reminders: Optional[List[datetime]] = Field(None, description="Reminder timestamps")


class TaskResponse(_CamelModel):
    """Schema for task API responses."""
    id: str = Field(..., description="Unique task identifier")
    user_id: str = Field(..., alias="userId", description="Owning user identifier")
    title: str = Field(..., description="Task title")
    description: str = Field(..., description="Task description")
    status: TaskStatus = Field(..., description="Task status")
    priority: TaskPriority = Field(..., description="Task priority")
    due_date: Optional[datetime] = Field(None, alias="dueDate", description="Optional due date")
    reminders: List[datetime] = Field(default_factory=list, description="Reminder timestamps")
    created_at: datetime = Field(..., alias="createdAt", description="Task creation timestamp")
    updated_at: datetime = Field(..., alias="updatedAt", description="Task last update timestamp")


class MessageResponse(BaseModel):
    """Schema for plain confirmation responses."""
    msg: str = Field(..., description="Human-readable message")


# Statistics schemas
class DailyCompletion(BaseModel):
    """Completed task count for one day."""
    date: str = Field(..., description="ISO date (YYYY-MM-DD)")
    completed: int = Field(..., description="Tasks completed that day")


class TaskStatistics(_CamelModel):
    """Schema for per-user task statistics."""
    total: int = Field(..., description="Total number of tasks")
    completed: int = Field(..., description="Number of completed tasks")
    pending: int = Field(..., description="Number of pending tasks")
    overdue: int = Field(..., description="Pending tasks past their due date")
    completion_rate: float = Field(..., alias="completionRate", description="Completed share in percent")
    by_priority: Dict[str, int] = Field(..., alias="byPriority", description="Task count per priority")
    completed_by_date: List[DailyCompletion] = Field(
        ..., alias="completedByDate", description="Completed tasks per day, oldest first"
    )


# Suggestion schemas
class SuggestionRequest(_CamelModel):
    """Schema for AI sub-task suggestion requests."""
    main_task_title: Optional[str] = Field(None, alias="mainTaskTitle", description="Main task title")


class SuggestionResponse(BaseModel):
    """Schema for AI sub-task suggestion responses."""
    suggestions: List[str] = Field(..., description="Suggested sub-tasks")
