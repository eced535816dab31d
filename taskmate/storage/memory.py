"""Thread-safe in-memory document stores for users and tasks.

Records are deep-copied on the way in and out, so a caller holding a model
never shares mutable state with the store; changes only land through
``save``/``add``.
"""

import logging
from threading import Lock
from typing import Dict, List, Optional

from ..models.task import Task
from ..models.user import User

logger = logging.getLogger(__name__)


class UserStore:
    """Credential store keyed by user id with unique username and email."""

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._lock = Lock()
        logger.info("User store initialized with in-memory storage")

    def add(self, user: User) -> User:
        """Insert a new user.

        Raises:
            KeyError: If the username or email is already taken
        """
        with self._lock:
            for existing in self._users.values():
                if existing.email == user.email:
                    raise KeyError("email")
                if existing.username == user.username:
                    raise KeyError("username")
            self._users[user.id] = user.model_copy(deep=True)
            return user.model_copy(deep=True)

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy(deep=True) if user else None

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user.model_copy(deep=True)
            return None

    def find_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user.model_copy(deep=True)
            return None

    def find_by_identifier(self, identifier: str) -> Optional[User]:
        """Find a user whose email or username equals ``identifier``."""
        with self._lock:
            for user in self._users.values():
                if identifier in (user.email, user.username):
                    return user.model_copy(deep=True)
            return None

    def count(self) -> int:
        with self._lock:
            return len(self._users)


class TaskStore:
    """Task store keyed by task id."""

    def __init__(self):
        self._tasks: Dict[str, Task] = {}
        self._lock = Lock()
        logger.info("Task store initialized with in-memory storage")

    def save(self, task: Task) -> Task:
        """Insert or replace a task (last write wins)."""
        with self._lock:
            self._tasks[task.id] = task.model_copy(deep=True)
            return task.model_copy(deep=True)

    def get(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = self._tasks.get(task_id)
            return task.model_copy(deep=True) if task else None

    def delete(self, task_id: str) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def list_by_user(self, user_id: str) -> List[Task]:
        """All tasks owned by ``user_id`` in insertion order."""
        with self._lock:
            return [
                task.model_copy(deep=True)
                for task in self._tasks.values()
                if task.user_id == user_id
            ]

    def count(self) -> int:
        with self._lock:
            return len(self._tasks)
