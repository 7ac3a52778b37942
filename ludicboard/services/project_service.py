"""Service for projects and project membership."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ludicboard.errors import NotFoundError, PermissionDenied, ValidationError
from ludicboard.models.attachment import Attachment
from ludicboard.models.comment import Comment
from ludicboard.models.project import Project, ProjectMembership, ProjectRole
from ludicboard.models.task import Task
from ludicboard.models.task_assignment import project_teams, task_assignments
from ludicboard.models.team import Team
from ludicboard.models.user import User
from ludicboard.services.permissions import ALL_ROLES, MANAGER_ROLES, require_project_role

if TYPE_CHECKING:
    from ludicboard.schemas.project import ProjectCreate, ProjectUpdate

logger = logging.getLogger("ludicboard.projects")

LAST_OWNER_MESSAGE = "Cannot remove the last owner of a project"
OWNER_ONLY_MESSAGE = "Only an owner can manage owner memberships"


class ProjectService:
    """Business logic for projects and their memberships."""

    @staticmethod
    def list_projects(db: Session, user_id: int) -> list[Project]:
        """Projects the user holds any role on."""
        return (
            db.query(Project)
            .join(ProjectMembership, ProjectMembership.project_id == Project.id)
            .filter(ProjectMembership.user_id == user_id)
            .order_by(Project.id)
            .all()
        )

    @staticmethod
    def create_project(db: Session, user_id: int, project_data: "ProjectCreate") -> Project:
        """Create a project and the creator's OWNER membership in one transaction."""
        project = Project(**project_data.model_dump())
        db.add(project)
        db.flush()
        db.add(ProjectMembership(project_id=project.id, user_id=user_id, role=ProjectRole.OWNER))
        db.commit()
        db.refresh(project)
        logger.info("Created project_id=%s owner user_id=%s", project.id, user_id)
        return project

    @staticmethod
    def get_project(db: Session, user_id: int, project_id: int) -> Project:
        require_project_role(db, user_id, project_id, ALL_ROLES)
        return db.get(Project, project_id)

    @staticmethod
    def update_project(
        db: Session, user_id: int, project_id: int, project_data: "ProjectUpdate"
    ) -> Project:
        require_project_role(db, user_id, project_id, MANAGER_ROLES)
        project = db.get(Project, project_id)
        for key, value in project_data.model_dump(exclude_unset=True).items():
            setattr(project, key, value)
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def delete_project(db: Session, user_id: int, project_id: int) -> None:
        """Delete a project and everything hanging off it as a single transaction.

        Order: assignments, comments, attachments, tasks, project-teams,
        memberships, project. A failure at any step rolls the whole delete back.
        """
        require_project_role(db, user_id, project_id, frozenset({ProjectRole.OWNER}))

        bulk = {"synchronize_session": False}
        task_ids = select(Task.id).where(Task.project_id == project_id).scalar_subquery()
        try:
            db.execute(delete(task_assignments).where(task_assignments.c.task_id.in_(task_ids)))
            db.execute(delete(Comment).where(Comment.task_id.in_(task_ids)), execution_options=bulk)
            db.execute(delete(Attachment).where(Attachment.task_id.in_(task_ids)), execution_options=bulk)
            db.execute(delete(Task).where(Task.project_id == project_id), execution_options=bulk)
            db.execute(delete(project_teams).where(project_teams.c.project_id == project_id))
            db.execute(
                delete(ProjectMembership).where(ProjectMembership.project_id == project_id),
                execution_options=bulk,
            )
            db.execute(delete(Project).where(Project.id == project_id), execution_options=bulk)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error("Rolled back delete of project_id=%s", project_id, exc_info=True)
            raise
        # Bulk deletes bypass the identity map
        db.expire_all()
        logger.info("Deleted project_id=%s by user_id=%s", project_id, user_id)

    @staticmethod
    def list_members(db: Session, user_id: int, project_id: int) -> list[ProjectMembership]:
        require_project_role(db, user_id, project_id, ALL_ROLES)
        return (
            db.query(ProjectMembership)
            .filter(ProjectMembership.project_id == project_id)
            .order_by(ProjectMembership.id)
            .all()
        )

    @staticmethod
    def _owner_count(db: Session, project_id: int) -> int:
        return (
            db.query(func.count(ProjectMembership.id))
            .filter(
                ProjectMembership.project_id == project_id,
                ProjectMembership.role == ProjectRole.OWNER,
            )
            .scalar()
        )

    @staticmethod
    def _require_owner_for(caller_role: ProjectRole, *roles: ProjectRole) -> None:
        """Admins manage members, but only owners touch the OWNER role."""
        if caller_role != ProjectRole.OWNER and ProjectRole.OWNER in roles:
            raise PermissionDenied(OWNER_ONLY_MESSAGE)

    @staticmethod
    def _get_membership(db: Session, project_id: int, member_id: int) -> ProjectMembership:
        membership = (
            db.query(ProjectMembership)
            .filter(ProjectMembership.project_id == project_id, ProjectMembership.user_id == member_id)
            .first()
        )
        if membership is None:
            raise NotFoundError("Membership not found")
        return membership

    @staticmethod
    def add_member(
        db: Session, user_id: int, project_id: int, member_id: int, role: ProjectRole
    ) -> ProjectMembership:
        caller_role = require_project_role(db, user_id, project_id, MANAGER_ROLES)
        ProjectService._require_owner_for(caller_role, role)
        if db.get(User, member_id) is None:
            raise NotFoundError("User not found")
        existing = (
            db.query(ProjectMembership)
            .filter(ProjectMembership.project_id == project_id, ProjectMembership.user_id == member_id)
            .first()
        )
        if existing:
            raise ValidationError("User is already a member of this project")

        membership = ProjectMembership(project_id=project_id, user_id=member_id, role=role)
        db.add(membership)
        db.commit()
        db.refresh(membership)
        logger.info("Added user_id=%s to project_id=%s as %s", member_id, project_id, role.value)
        return membership

    @staticmethod
    def update_member_role(
        db: Session, user_id: int, project_id: int, member_id: int, role: ProjectRole
    ) -> ProjectMembership:
        caller_role = require_project_role(db, user_id, project_id, MANAGER_ROLES)
        membership = ProjectService._get_membership(db, project_id, member_id)
        ProjectService._require_owner_for(caller_role, membership.role, role)
        if (
            membership.role == ProjectRole.OWNER
            and role != ProjectRole.OWNER
            and ProjectService._owner_count(db, project_id) <= 1
        ):
            raise ValidationError(LAST_OWNER_MESSAGE)

        membership.role = role
        db.commit()
        db.refresh(membership)
        logger.info("Changed role of user_id=%s on project_id=%s to %s", member_id, project_id, role.value)
        return membership

    @staticmethod
    def remove_member(db: Session, user_id: int, project_id: int, member_id: int) -> None:
        caller_role = require_project_role(db, user_id, project_id, MANAGER_ROLES)
        membership = ProjectService._get_membership(db, project_id, member_id)
        ProjectService._require_owner_for(caller_role, membership.role)
        if membership.role == ProjectRole.OWNER and ProjectService._owner_count(db, project_id) <= 1:
            raise ValidationError(LAST_OWNER_MESSAGE)

        db.delete(membership)
        db.commit()
        logger.info("Removed user_id=%s from project_id=%s", member_id, project_id)

    @staticmethod
    def link_team(db: Session, user_id: int, project_id: int, team_id: int) -> Project:
        require_project_role(db, user_id, project_id, MANAGER_ROLES)
        team = db.get(Team, team_id)
        if team is None:
            raise NotFoundError("Team not found")
        project = db.get(Project, project_id)
        if team not in project.teams:
            project.teams.append(team)
            db.commit()
            db.refresh(project)
        return project


__all__ = ["LAST_OWNER_MESSAGE", "ProjectService"]
