"""API router for projects and project membership."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from ludicboard.database import get_db
from ludicboard.dependencies import get_current_user
from ludicboard.models.user import User
from ludicboard.schemas.common import MessageResponse
from ludicboard.schemas.project import (
    MembershipCreate,
    MembershipResponse,
    MembershipRoleUpdate,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)
from ludicboard.services.project_service import ProjectService

router = APIRouter()

ProjectId = Annotated[int, Path(ge=1, description="Project ID must be a positive integer")]
UserId = Annotated[int, Path(ge=1, description="User ID must be a positive integer")]
TeamId = Annotated[int, Path(ge=1, description="Team ID must be a positive integer")]


@router.get("/", response_model=list[ProjectResponse])
def list_projects(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ProjectResponse]:
    """List projects the caller is a member of."""
    projects = ProjectService.list_projects(db, current_user.user_id)
    return [ProjectResponse.model_validate(project) for project in projects]


@router.post("/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    project: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProjectResponse:
    """Create a project owned by the caller."""
    created = ProjectService.create_project(db, current_user.user_id, project)
    return ProjectResponse.model_validate(created)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: ProjectId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProjectResponse:
    project = ProjectService.get_project(db, current_user.user_id, project_id)
    return ProjectResponse.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_update: ProjectUpdate,
    project_id: ProjectId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProjectResponse:
    project = ProjectService.update_project(db, current_user.user_id, project_id, project_update)
    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: ProjectId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Delete a project and all of its tasks. OWNER only."""
    ProjectService.delete_project(db, current_user.user_id, project_id)
    return MessageResponse(message="Project deleted successfully.")


@router.get("/{project_id}/members", response_model=list[MembershipResponse])
def list_members(
    project_id: ProjectId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[MembershipResponse]:
    memberships = ProjectService.list_members(db, current_user.user_id, project_id)
    return [MembershipResponse.model_validate(membership) for membership in memberships]


@router.post(
    "/{project_id}/members",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    member: MembershipCreate,
    project_id: ProjectId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MembershipResponse:
    membership = ProjectService.add_member(
        db, current_user.user_id, project_id, member.user_id, member.role
    )
    return MembershipResponse.model_validate(membership)


@router.patch("/{project_id}/members/{user_id}/role", response_model=MembershipResponse)
def update_member_role(
    role_update: MembershipRoleUpdate,
    project_id: ProjectId,
    user_id: UserId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MembershipResponse:
    membership = ProjectService.update_member_role(
        db, current_user.user_id, project_id, user_id, role_update.role
    )
    return MembershipResponse.model_validate(membership)


@router.delete("/{project_id}/members/{user_id}", response_model=MessageResponse)
def remove_member(
    project_id: ProjectId,
    user_id: UserId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    ProjectService.remove_member(db, current_user.user_id, project_id, user_id)
    return MessageResponse(message="Member removed successfully.")


@router.post("/{project_id}/teams/{team_id}", response_model=MessageResponse)
def link_team(
    project_id: ProjectId,
    team_id: TeamId,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    ProjectService.link_team(db, current_user.user_id, project_id, team_id)
    return MessageResponse(message="Team linked to project.")
