"""Task management CRUD, statistics and suggestion routes.

All routes require the ``x-auth-token`` header and only ever touch tasks owned
by the caller.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..deps import CurrentUserId, get_suggestion_service, get_task_service
from ..exceptions import TaskmateError
from ..models.task import Task, TaskPriority, TaskStatus
from ..schemas import (
    MessageResponse,
    SuggestionRequest,
    SuggestionResponse,
    TaskCreate,
    TaskResponse,
    TaskStatistics,
    TaskUpdate,
)
from ..services.suggestion_service import SuggestionService
from ..services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def _to_response(task: Task) -> TaskResponse:
    return TaskResponse.model_validate(task.model_dump())


@router.post("/suggest", response_model=SuggestionResponse)
async def suggest_subtasks(
    data: SuggestionRequest,
    user_id: CurrentUserId,
    suggestion_service: SuggestionService = Depends(get_suggestion_service),
) -> SuggestionResponse:
    """Get AI-generated sub-task suggestions for a main task title.

    Raises:
        ValidationError: If the title is empty
        UpstreamThrottledError: If the model stays rate limited
        ConfigurationError: If the model is not configured
    """
    try:
        logger.info(f"Requesting suggestions for user {user_id}")

        suggestions = await suggestion_service.suggest(data.main_task_title)

        return SuggestionResponse(suggestions=suggestions)

    except TaskmateError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error generating suggestions: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server Error during AI suggestion generation"
        )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    user_id: CurrentUserId,
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Create a new task owned by the caller.

    Raises:
        ValidationError: If the title is empty
    """
    try:
        logger.info(f"Creating new task: {task_data.title}")

        task = task_service.create_task_from_schema(user_id, task_data)

        return _to_response(task)

    except TaskmateError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error creating task: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error during task creation"
        )


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    user_id: CurrentUserId,
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    priority_filter: Optional[TaskPriority] = Query(None, alias="priority"),
    task_service: TaskService = Depends(get_task_service),
) -> List[TaskResponse]:
    """List the caller's tasks, newest first, with optional filters."""
    try:
        logger.debug(f"Listing tasks with filters: status={status_filter}, priority={priority_filter}")

        tasks = task_service.list_tasks(user_id, status=status_filter, priority=priority_filter)

        return [_to_response(task) for task in tasks]

    except TaskmateError:
        raise
    except Exception as e:
        logger.error(f"Error listing tasks: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while listing tasks"
        )


@router.get("/stats", response_model=TaskStatistics)
async def get_task_statistics(
    user_id: CurrentUserId,
    task_service: TaskService = Depends(get_task_service),
) -> TaskStatistics:
    """Get completion statistics for the caller's tasks."""
    try:
        logger.debug("Getting task statistics")

        return TaskStatistics.model_validate(task_service.get_statistics(user_id))

    except TaskmateError:
        raise
    except Exception as e:
        logger.error(f"Error getting task statistics: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while retrieving statistics"
        )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    user_id: CurrentUserId,
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Get a specific task by ID.

    Raises:
        NotFoundError: If the task does not exist
        ForbiddenError: If the task belongs to another user
    """
    try:
        logger.debug(f"Getting task: {task_id}")

        return _to_response(task_service.get_task(user_id, task_id))

    except TaskmateError:
        raise
    except Exception as e:
        logger.error(f"Error getting task {task_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while retrieving task"
        )


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user_id: CurrentUserId,
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Update the fields present in the request body.

    Raises:
        NotFoundError: If the task does not exist
        ForbiddenError: If the task belongs to another user
        ValidationError: If a field value is not allowed
    """
    try:
        logger.info(f"Updating task: {task_id}")

        task = task_service.update_task(user_id, task_id, task_data)

        return _to_response(task)

    except TaskmateError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error updating task {task_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error during task update"
        )


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    user_id: CurrentUserId,
    task_service: TaskService = Depends(get_task_service),
) -> MessageResponse:
    """Delete a task.

    Raises:
        NotFoundError: If the task does not exist
        ForbiddenError: If the task belongs to another user
    """
    try:
        logger.info(f"Deleting task: {task_id}")

        task_service.delete_task(user_id, task_id)

        return MessageResponse(msg="Task removed")

    except TaskmateError:
        raise
    except Exception as e:
        logger.error(f"Error deleting task {task_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error during task deletion"
        )
