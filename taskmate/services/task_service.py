"""Task service for user-scoped CRUD operations and statistics."""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from ..exceptions import ForbiddenError, NotFoundError, ValidationError
from ..models.task import Task, TaskPriority, TaskStatus, utcnow
from ..schemas import TaskCreate, TaskUpdate
from ..storage import TaskStore

logger = logging.getLogger(__name__)

# Fields that may not be explicitly set to null on update
_NON_NULLABLE_FIELDS = ("title", "status", "priority")


class TaskService:
    """Service for task CRUD operations scoped to the owning user.

    A task that does not exist raises ``NotFoundError``; a task owned by
    someone else raises ``ForbiddenError``. Every method that takes a task id
    applies that rule the same way.
    """

    def __init__(self, task_store: TaskStore):
        """Initialize the task service.

        Args:
            task_store: Backing task store
        """
        self.tasks = task_store
        logger.info("Task service initialized")

    def create_task(
        self,
        user_id: str,
        title: str,
        description: Optional[str] = None,
        priority: Optional[TaskPriority] = None,
        due_date=None,
        reminders=None,
    ) -> Task:
        """Create a new task owned by ``user_id``.

        Args:
            user_id: Owning user
            title: Task title
            description: Optional task description
            priority: Optional priority, defaults to medium
            due_date: Optional due date
            reminders: Optional reminder timestamps

        Returns:
            Created task

        Raises:
            ValidationError: If title is empty or invalid
        """
        if not title or not title.strip():
            raise ValidationError("Task title cannot be empty")

        task = Task(
            user_id=user_id,
            title=title.strip(),
            description=description.strip() if description else "",
            priority=priority or TaskPriority.MEDIUM,
            due_date=due_date,
            reminders=list(reminders or []),
        )
        task = self.tasks.save(task)

        logger.info(f"Created task {task.id} for user {user_id}: {task.title}")
        return task

    def create_task_from_schema(self, user_id: str, task_data: TaskCreate) -> Task:
        """Create a new task from a request schema."""
        return self.create_task(
            user_id,
            title=task_data.title,
            description=task_data.description,
            priority=task_data.priority,
            due_date=task_data.due_date,
            reminders=task_data.reminders,
        )

    def get_task(self, user_id: str, task_id: str) -> Task:
        """Get a task owned by ``user_id``.

        Raises:
            NotFoundError: If no task has this id
            ForbiddenError: If the task belongs to another user
        """
        task = self.tasks.get(task_id)
        if task is None:
            logger.debug(f"Task {task_id} not found")
            raise NotFoundError()
        if task.user_id != user_id:
            logger.warning(f"User {user_id} not authorized for task {task_id}")
            raise ForbiddenError()
        return task

    def update_task(self, user_id: str, task_id: str, task_data: TaskUpdate) -> Task:
        """Apply the fields present in ``task_data`` to a task.

        A request with no recognized fields returns the task unchanged and
        does not touch ``updated_at``.

        Raises:
            NotFoundError: If no task has this id
            ForbiddenError: If the task belongs to another user
            ValidationError: If a field value is not allowed
        """
        task = self.get_task(user_id, task_id)
        changes = task_data.model_dump(exclude_unset=True)
        if "reminders" in changes and changes["reminders"] is None:
            del changes["reminders"]

        if not changes:
            logger.debug(f"No fields to update for task {task_id}")
            return task

        for field in _NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"Task {field} cannot be null")

        if "title" in changes:
            if not changes["title"].strip():
                raise ValidationError("Task title cannot be empty")
            task.title = changes["title"].strip()

        if "description" in changes:
            task.description = (changes["description"] or "").strip()

        if "status" in changes:
            task.status = changes["status"]

        if "priority" in changes:
            task.priority = changes["priority"]

        if "due_date" in changes:
            task.due_date = changes["due_date"]

        if "reminders" in changes:
            task.reminders = list(changes["reminders"])

        task.update_timestamp()
        task = self.tasks.save(task)

        logger.info(f"Updated task {task_id}: {sorted(changes)}")
        return task

    def delete_task(self, user_id: str, task_id: str) -> None:
        """Delete a task owned by ``user_id``.

        Raises:
            NotFoundError: If no task has this id
            ForbiddenError: If the task belongs to another user
        """
        self.get_task(user_id, task_id)
        if not self.tasks.delete(task_id):
            # Removed concurrently between the check and the delete
            raise NotFoundError()
        logger.info(f"Deleted task {task_id}")

    def list_tasks(
        self,
        user_id: str,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
    ) -> List[Task]:
        """List a user's tasks, newest first.

        Args:
            user_id: Owning user
            status: Filter by status
            priority: Filter by priority

        Returns:
            List of tasks matching the filters
        """
        # Reverse insertion order first so tasks created in the same instant
        # still come out newest first after the stable sort.
        tasks = list(reversed(self.tasks.list_by_user(user_id)))

        if status is not None:
            tasks = [task for task in tasks if task.status == status]

        if priority is not None:
            tasks = [task for task in tasks if task.priority == priority]

        tasks.sort(key=lambda t: t.created_at, reverse=True)

        logger.debug(f"Listed {len(tasks)} tasks for user {user_id} (status={status}, priority={priority})")
        return tasks

    def get_statistics(self, user_id: str) -> Dict[str, Any]:
        """Get task statistics for one user.

        Returns:
            Dictionary with counts, completion rate and a completed-per-day series
        """
        tasks = self.tasks.list_by_user(user_id)
        total_tasks = len(tasks)
        completed = [task for task in tasks if task.status == TaskStatus.COMPLETED]
        completion_rate = (len(completed) / total_tasks * 100) if total_tasks > 0 else 0.0

        by_priority = {priority.value: 0 for priority in TaskPriority}
        for task in tasks:
            by_priority[TaskPriority(task.priority).value] += 1

        per_day = Counter(task.updated_at.date().isoformat() for task in completed)

        now = utcnow()
        return {
            "total": total_tasks,
            "completed": len(completed),
            "pending": total_tasks - len(completed),
            "overdue": sum(1 for task in tasks if task.is_overdue(now)),
            "completion_rate": round(completion_rate, 2),
            "by_priority": by_priority,
            "completed_by_date": [
                {"date": day, "completed": per_day[day]} for day in sorted(per_day)
            ],
        }


# Global task service instance - will be initialized during app startup
_task_service: Optional[TaskService] = None


def get_task_service() -> Optional[TaskService]:
    """Get the global task service instance.

    Returns:
        Task service instance or None if not initialized
    """
    return _task_service


def initialize_task_service(task_store: TaskStore) -> TaskService:
    """Initialize the global task service instance.

    Returns:
        Initialized task service
    """
    global _task_service
    _task_service = TaskService(task_store)
    return _task_service
