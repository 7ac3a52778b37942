"""API router for free-text search."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ludicboard.database import get_db
from ludicboard.schemas.project import ProjectResponse
from ludicboard.schemas.search import SearchResults
from ludicboard.schemas.task import TaskResponse
from ludicboard.schemas.user import UserSummary
from ludicboard.services.search_service import SearchService

router = APIRouter()


@router.get("/", response_model=SearchResults)
def search(
    query: str | None = Query(None, description="Search text; fewer than 2 characters returns nothing"),
    db: Session = Depends(get_db),
) -> SearchResults:
    """Search tasks, projects and users, most relevant first."""
    result = SearchService.search(db, query)
    return SearchResults(
        tasks=[TaskResponse.model_validate(task) for task in result.tasks],
        projects=[ProjectResponse.model_validate(project) for project in result.projects],
        users=[UserSummary.model_validate(user) for user in result.users],
    )
