"""Project roles, task permission tiers and the per-resource authorization policies.

Everything here is recomputed from the database on every call. Nothing is
cached, so a role change is visible to the very next request.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from sqlalchemy.orm import Session

from ludicboard.errors import NotFoundError, PermissionDenied
from ludicboard.models.comment import Comment
from ludicboard.models.project import Project, ProjectMembership, ProjectRole
from ludicboard.models.task import Task

if TYPE_CHECKING:
    from ludicboard.models.user import User

logger = logging.getLogger("ludicboard.projects")

ALL_ROLES = frozenset(ProjectRole)
MANAGER_ROLES = frozenset({ProjectRole.OWNER, ProjectRole.ADMIN})
CONTRIBUTOR_ROLES = frozenset({ProjectRole.OWNER, ProjectRole.ADMIN, ProjectRole.MEMBER})


class TaskPermission(str, Enum):
    """Edit rights of a caller on one task."""

    FULL = "FULL"  # author
    PARTIAL = "PARTIAL"  # assignee: status changes and attachments
    VIEW = "VIEW"  # project member, read-only


VIEW_TIERS = frozenset(TaskPermission)
STATUS_TIERS = frozenset({TaskPermission.FULL, TaskPermission.PARTIAL})
EDIT_TIERS = frozenset({TaskPermission.FULL})


def get_project_role(db: Session, user_id: int, project_id: int) -> ProjectRole | None:
    """Return the caller's role on a project, or None when there is no membership."""
    membership = (
        db.query(ProjectMembership)
        .filter(ProjectMembership.project_id == project_id, ProjectMembership.user_id == user_id)
        .first()
    )
    return membership.role if membership else None


def require_project_role(
    db: Session,
    user_id: int,
    project_id: int,
    allowed: frozenset[ProjectRole] = ALL_ROLES,
) -> ProjectRole:
    """Ensure the project exists and the caller holds one of ``allowed``.

    Raises:
        NotFoundError: project does not exist.
        PermissionDenied: no membership, or a role outside ``allowed``.
    """
    if db.get(Project, project_id) is None:
        raise NotFoundError("Project not found")
    role = get_project_role(db, user_id, project_id)
    if role is None:
        logger.info("Denied project access: user_id=%s project_id=%s (no membership)", user_id, project_id)
        raise PermissionDenied("You do not have access to this project")
    if role not in allowed:
        logger.info(
            "Denied project action: user_id=%s project_id=%s role=%s", user_id, project_id, role.value
        )
        raise PermissionDenied("Insufficient project role permissions")
    return role


def compute_task_permission(
    user_id: int,
    author_user_id: int,
    assignee_ids: set[int] | frozenset[int],
    project_role: ProjectRole | None,
) -> TaskPermission | None:
    """Derive the task tier from already-loaded facts.

    Author beats assignee beats plain membership; None means no relation at all.
    """
    if user_id == author_user_id:
        return TaskPermission.FULL
    if user_id in assignee_ids:
        return TaskPermission.PARTIAL
    if project_role is not None:
        return TaskPermission.VIEW
    return None


def get_task_permission(db: Session, user_id: int, task: Task) -> TaskPermission | None:
    """Look up the caller's membership on the task's project and compute the tier."""
    role = get_project_role(db, user_id, task.project_id)
    assignee_ids = {user.user_id for user in task.assignees}
    return compute_task_permission(user_id, task.author_user_id, assignee_ids, role)


def require_task_permission(
    db: Session,
    user_id: int,
    task_id: int,
    allowed: frozenset[TaskPermission] = VIEW_TIERS,
) -> tuple[Task, TaskPermission]:
    """Load a task and ensure the caller's tier is in ``allowed``."""
    task = db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    permission = get_task_permission(db, user_id, task)
    if permission is None:
        logger.info("Denied task access: user_id=%s task_id=%s", user_id, task_id)
        raise PermissionDenied("You do not have permission to access this task")
    if permission not in allowed:
        logger.info(
            "Denied task action: user_id=%s task_id=%s permission=%s", user_id, task_id, permission.value
        )
        raise PermissionDenied("You do not have permission to modify this task")
    return task, permission


class AuthorizationPolicy(Protocol):
    """Edit/delete decision for one resource type."""

    def can_edit(self, actor: "User", resource: object, db: Session) -> bool: ...

    def can_delete(self, actor: "User", resource: object, db: Session) -> bool: ...


class TaskPolicy:
    """Full edits and deletion belong to the author; assignees may move status and attach files.

    ``TaskService`` asks this policy before every task write.
    """

    def can_view(self, actor: "User", task: Task, db: Session) -> bool:
        return get_task_permission(db, actor.user_id, task) is not None

    def can_edit(self, actor: "User", task: Task, db: Session) -> bool:
        return get_task_permission(db, actor.user_id, task) in EDIT_TIERS

    def can_change_status(self, actor: "User", task: Task, db: Session) -> bool:
        return get_task_permission(db, actor.user_id, task) in STATUS_TIERS

    def can_attach(self, actor: "User", task: Task, db: Session) -> bool:
        return self.can_change_status(actor, task, db)

    def can_delete(self, actor: "User", task: Task, db: Session) -> bool:
        return self.can_edit(actor, task, db)


class CommentPolicy:
    """Only the author of a comment may edit or delete it."""

    def can_edit(self, actor: "User", comment: Comment, db: Session) -> bool:
        return comment.user_id == actor.user_id

    def can_delete(self, actor: "User", comment: Comment, db: Session) -> bool:
        return comment.user_id == actor.user_id


task_policy = TaskPolicy()
comment_policy = CommentPolicy()


__all__ = [
    "ALL_ROLES",
    "AuthorizationPolicy",
    "CONTRIBUTOR_ROLES",
    "CommentPolicy",
    "EDIT_TIERS",
    "MANAGER_ROLES",
    "STATUS_TIERS",
    "TaskPermission",
    "TaskPolicy",
    "VIEW_TIERS",
    "comment_policy",
    "compute_task_permission",
    "get_project_role",
    "get_task_permission",
    "require_project_role",
    "require_task_permission",
    "task_policy",
]
