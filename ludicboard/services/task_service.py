"""Service for task, comment and attachment business logic."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ludicboard.errors import NotFoundError, PermissionDenied, ValidationError
from ludicboard.models.attachment import Attachment
from ludicboard.models.comment import Comment
from ludicboard.models.project import Project, ProjectMembership
from ludicboard.models.task import Task
from ludicboard.models.task_assignment import task_assignments
from ludicboard.models.user import User
from ludicboard.services.permissions import (
    ALL_ROLES,
    CONTRIBUTOR_ROLES,
    comment_policy,
    require_project_role,
    require_task_permission,
    task_policy,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from ludicboard.models.task import TaskStatus
    from ludicboard.schemas.task import AttachmentCreate, CommentCreate, TaskCreate, TaskUpdate

logger = logging.getLogger("ludicboard.tasks")

NON_NULLABLE_FIELDS = frozenset({"title", "status"})
MODIFY_DENIED = "You do not have permission to modify this task"


def _join_tags(tags: list[str] | None) -> str | None:
    if not tags:
        return None
    return ",".join(tag.strip() for tag in tags if tag.strip()) or None


class TaskService:
    """Service for managing project tasks."""

    @staticmethod
    def _get_users_by_ids(db: Session, user_ids: list[int]) -> list[User]:
        """Load users by IDs ensuring all exist."""
        if not user_ids:
            return []
        unique_ids = sorted(set(user_ids))
        users = db.query(User).filter(User.user_id.in_(unique_ids)).all()
        found_ids = {user.user_id for user in users}
        missing = sorted(set(unique_ids) - found_ids)
        if missing:
            raise ValidationError(f"Users not found: {missing}")
        return sorted(users, key=lambda user: user.user_id)

    @staticmethod
    def create_task(db: Session, user_id: int, task_data: "TaskCreate") -> Task:
        """Create a task authored by the caller.

        Only OWNER, ADMIN and MEMBER roles may create tasks.
        """
        require_project_role(db, user_id, task_data.project_id, CONTRIBUTOR_ROLES)
        if task_data.author_user_id is not None and task_data.author_user_id != user_id:
            raise PermissionDenied("Tasks can only be created on your own behalf")

        payload = task_data.model_dump(
            exclude={"author_user_id", "assigned_user_id", "assigned_user_ids", "tags"}
        )
        task = Task(**payload, author_user_id=user_id, tags=_join_tags(task_data.tags))
        task.assignees = TaskService._get_users_by_ids(db, task_data.requested_assignee_ids())

        db.add(task)
        db.commit()
        db.refresh(task)
        logger.info("Created task_id=%s in project_id=%s by user_id=%s", task.id, task.project_id, user_id)
        return task

    @staticmethod
    def get_task(db: Session, user_id: int, task_id: int) -> Task:
        task, _ = require_task_permission(db, user_id, task_id)
        return task

    @staticmethod
    def get_project_tasks(db: Session, user_id: int, project_id: int) -> list[Task]:
        """Tasks of a project the caller belongs to; an unknown project has none."""
        if db.get(Project, project_id) is None:
            return []
        require_project_role(db, user_id, project_id, ALL_ROLES)
        return db.query(Task).filter(Task.project_id == project_id).order_by(Task.id).all()

    @staticmethod
    def _assigned_task_ids(db: Session, user_id: int):
        return (
            db.query(task_assignments.c.task_id)
            .filter(task_assignments.c.user_id == user_id)
            .scalar_subquery()
        )

    @staticmethod
    def get_user_tasks(db: Session, caller_id: int, user_id: int) -> list[Task]:
        """Tasks authored by or assigned to ``user_id`` that the caller can see.

        A task is visible through project membership or through being its
        author or assignee, the same relations that grant a task tier.
        """
        visible_projects = (
            db.query(ProjectMembership.project_id)
            .filter(ProjectMembership.user_id == caller_id)
            .scalar_subquery()
        )
        return (
            db.query(Task)
            .filter(
                or_(
                    Task.project_id.in_(visible_projects),
                    Task.author_user_id == caller_id,
                    Task.id.in_(TaskService._assigned_task_ids(db, caller_id)),
                )
            )
            .filter(
                or_(
                    Task.author_user_id == user_id,
                    Task.id.in_(TaskService._assigned_task_ids(db, user_id)),
                )
            )
            .order_by(Task.id)
            .all()
        )

    @staticmethod
    def _authorize(
        db: Session, user_id: int, task_id: int, check: Callable[[User, Task, Session], bool]
    ) -> Task:
        """Load a visible task and ask ``task_policy`` whether the caller may act on it."""
        task, _ = require_task_permission(db, user_id, task_id)
        actor = db.get(User, user_id)
        if actor is None or not check(actor, task, db):
            logger.info("Denied task action: user_id=%s task_id=%s", user_id, task_id)
            raise PermissionDenied(MODIFY_DENIED)
        return task

    @staticmethod
    def update_task(db: Session, user_id: int, task_id: int, task_data: "TaskUpdate") -> Task:
        """Full edit; only the task author may do this."""
        task = TaskService._authorize(db, user_id, task_id, task_policy.can_edit)

        update_data = task_data.model_dump(
            exclude_unset=True, exclude={"assigned_user_id", "assigned_user_ids", "tags"}
        )
        for key, value in update_data.items():
            if value is None and key in NON_NULLABLE_FIELDS:
                continue
            setattr(task, key, value)

        if "tags" in task_data.model_fields_set:
            task.tags = _join_tags(task_data.tags)

        assignee_fields = {"assigned_user_id", "assigned_user_ids"} & task_data.model_fields_set
        if assignee_fields:
            ids = list(task_data.assigned_user_ids or [])
            if task_data.assigned_user_id is not None:
                ids.append(task_data.assigned_user_id)
            task.assignees = TaskService._get_users_by_ids(db, ids)

        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def update_task_status(db: Session, user_id: int, task_id: int, status: "TaskStatus") -> Task:
        """Status change; the author and assignees may do this."""
        task = TaskService._authorize(db, user_id, task_id, task_policy.can_change_status)
        task.status = status
        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def delete_task(db: Session, user_id: int, task_id: int) -> None:
        """Delete a task with its assignments, comments and attachments in one transaction."""
        TaskService._authorize(db, user_id, task_id, task_policy.can_delete)

        bulk = {"synchronize_session": False}
        try:
            db.execute(delete(task_assignments).where(task_assignments.c.task_id == task_id))
            db.execute(delete(Comment).where(Comment.task_id == task_id), execution_options=bulk)
            db.execute(delete(Attachment).where(Attachment.task_id == task_id), execution_options=bulk)
            db.execute(delete(Task).where(Task.id == task_id), execution_options=bulk)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error("Rolled back delete of task_id=%s", task_id, exc_info=True)
            raise
        db.expire_all()
        logger.info("Deleted task_id=%s by user_id=%s", task_id, user_id)

    @staticmethod
    def add_attachment(db: Session, user_id: int, task_id: int, data: "AttachmentCreate") -> Attachment:
        TaskService._authorize(db, user_id, task_id, task_policy.can_attach)
        attachment = Attachment(
            file_url=data.file_url,
            file_name=data.file_name,
            task_id=task_id,
            uploaded_by_id=user_id,
        )
        db.add(attachment)
        db.commit()
        db.refresh(attachment)
        return attachment


class CommentService:
    """Comments on tasks. Only the author of a comment may change it."""

    @staticmethod
    def create_comment(db: Session, user_id: int, task_id: int, data: "CommentCreate") -> Comment:
        text = data.text.strip()
        if not text:
            raise ValidationError("Comment text is required")
        if data.user_id is not None and data.user_id != user_id:
            raise PermissionDenied("Comments can only be posted on your own behalf")
        require_task_permission(db, user_id, task_id)

        comment = Comment(text=text, task_id=task_id, user_id=user_id)
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment

    @staticmethod
    def _get_comment(db: Session, comment_id: int) -> Comment:
        comment = db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    @staticmethod
    def edit_comment(db: Session, user: User, comment_id: int, text: str) -> Comment:
        comment = CommentService._get_comment(db, comment_id)
        if not comment_policy.can_edit(user, comment, db):
            raise PermissionDenied("Only the comment author can edit this comment")
        text = text.strip()
        if not text:
            raise ValidationError("Comment text is required")

        comment.text = text
        db.commit()
        db.refresh(comment)
        return comment

    @staticmethod
    def delete_comment(db: Session, user: User, comment_id: int) -> Comment:
        comment = CommentService._get_comment(db, comment_id)
        if not comment_policy.can_delete(user, comment, db):
            raise PermissionDenied("Only the comment author can delete this comment")

        db.delete(comment)
        db.commit()
        logger.info("Deleted comment_id=%s by user_id=%s", comment_id, user.user_id)
        return comment


__all__ = ["CommentService", "TaskService"]
