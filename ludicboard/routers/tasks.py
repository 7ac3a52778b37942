"""API router for tasks, task comments and attachments."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from ludicboard.database import get_db
from ludicboard.dependencies import get_current_user
from ludicboard.models.user import User
from ludicboard.schemas.task import (
    AttachmentCreate,
    AttachmentResponse,
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    TaskCreate,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
)
from ludicboard.services.task_service import CommentService, TaskService

router = APIRouter()
logger = logging.getLogger("ludicboard.tasks")

TaskId = Annotated[int, Path(ge=1, description="Task ID must be a positive integer")]
CommentId = Annotated[int, Path(ge=1, description="Comment ID must be a positive integer")]


@router.get("/", response_model=list[TaskResponse])
def get_tasks(
    project_id: int = Query(..., alias="projectId", ge=1, description="Project to list tasks for"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TaskResponse]:
    """List a project's tasks with author, assignees, comments and attachments."""
    tasks = TaskService.get_project_tasks(db, current_user.user_id, project_id)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskResponse:
    """Create a task authored by the caller."""
    created_task = TaskService.create_task(db, current_user.user_id, task)
    return TaskResponse.model_validate(created_task)


@router.get("/user/{user_id}", response_model=list[TaskResponse])
def get_user_tasks(
    user_id: Annotated[int, Path(ge=1)],
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TaskResponse]:
    """Tasks a user authored or is assigned to, limited to tasks the caller can see."""
    tasks = TaskService.get_user_tasks(db, current_user.user_id, user_id)
    return [TaskResponse.model_validate(task) for task in tasks]


# Comment routes are declared before "/{task_id}" so "comments" is never parsed as an id
@router.patch("/comments/{comment_id}", response_model=CommentResponse)
def edit_comment(
    payload: CommentUpdate,
    comment_id: CommentId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CommentResponse:
    """Edit a comment. Author only."""
    comment = CommentService.edit_comment(db, current_user, comment_id, payload.text)
    return CommentResponse.model_validate(comment)


@router.delete("/comments/{comment_id}", response_model=CommentResponse)
def delete_comment(
    comment_id: CommentId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CommentResponse:
    """Delete a comment and return it. Author only."""
    comment = CommentService.delete_comment(db, current_user, comment_id)
    return CommentResponse.model_validate(comment)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: TaskId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskResponse:
    task = TaskService.get_task(db, current_user.user_id, task_id)
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_update: TaskUpdate,
    task_id: TaskId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskResponse:
    """Edit a task. Task author only."""
    task = TaskService.update_task(db, current_user.user_id, task_id, task_update)
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}/status", response_model=TaskResponse)
def update_task_status(
    payload: TaskStatusUpdate,
    task_id: TaskId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskResponse:
    """Move a task to another column. Author or assignee."""
    task = TaskService.update_task_status(db, current_user.user_id, task_id, payload.status)
    logger.info("HTTP status change: task_id=%s status=%s", task.id, task.status.value)
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: TaskId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    """Delete a task with its comments, attachments and assignments. Task author only."""
    TaskService.delete_task(db, current_user.user_id, task_id)


@router.post(
    "/{task_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    payload: CommentCreate,
    task_id: TaskId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CommentResponse:
    """Comment on a task the caller can see."""
    comment = CommentService.create_comment(db, current_user.user_id, task_id, payload)
    return CommentResponse.model_validate(comment)


@router.post(
    "/{task_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_attachment(
    payload: AttachmentCreate,
    task_id: TaskId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AttachmentResponse:
    attachment = TaskService.add_attachment(db, current_user.user_id, task_id, payload)
    return AttachmentResponse.model_validate(attachment)
