"""Free-text search over tasks, projects and users with relevance ranking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ludicboard.models.project import Project
from ludicboard.models.task import Task
from ludicboard.models.user import User

logger = logging.getLogger("ludicboard.search")

MIN_QUERY_LENGTH = 2
RESULT_LIMIT = 10

EXACT_MATCH_SCORE = 100
PREFIX_MATCH_SCORE = 50
SUBSTRING_MATCH_SCORE = 10

# Fields that contribute to the score of each entity kind
TASK_SCORED_FIELDS = ("title", "description")
PROJECT_SCORED_FIELDS = ("name", "description")
USER_SCORED_FIELDS = ("username",)


@dataclass(slots=True)
class SearchResult:
    tasks: list[Task] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    users: list[User] = field(default_factory=list)


def normalize_query(query: str | None) -> str | None:
    """Trim the query; return None when it is too short to search."""
    if not isinstance(query, str):
        return None
    trimmed = query.strip()
    if len(trimmed) < MIN_QUERY_LENGTH:
        return None
    return trimmed


def field_score(value: str | None, query: str) -> int:
    """Score one field value against the query, case-insensitively."""
    if not value:
        return 0
    value_lower = value.lower()
    query_lower = query.lower()
    if value_lower == query_lower:
        return EXACT_MATCH_SCORE
    if value_lower.startswith(query_lower):
        return PREFIX_MATCH_SCORE
    if query_lower in value_lower:
        return SUBSTRING_MATCH_SCORE
    return 0


def relevance_score(item: Any, query: str, fields: Iterable[str]) -> int:
    """Sum of field scores over ``fields`` of ``item``."""
    return sum(field_score(getattr(item, name, None), query) for name in fields)


def rank(items: Sequence[Any], query: str, fields: Iterable[str]) -> list[Any]:
    """Order by descending score; ``sorted`` is stable so ties keep store order."""
    fields = tuple(fields)
    return sorted(items, key=lambda item: relevance_score(item, query, fields), reverse=True)


class SearchService:
    """Case-insensitive substring search across entity kinds."""

    @staticmethod
    def search(db: Session, query: str | None) -> SearchResult:
        term = normalize_query(query)
        if term is None:
            return SearchResult()

        tasks = (
            db.query(Task)
            .filter(
                or_(
                    Task.title.icontains(term, autoescape=True),
                    Task.description.icontains(term, autoescape=True),
                )
            )
            .order_by(Task.id)
            .limit(RESULT_LIMIT)
            .all()
        )
        projects = (
            db.query(Project)
            .filter(
                or_(
                    Project.name.icontains(term, autoescape=True),
                    Project.description.icontains(term, autoescape=True),
                )
            )
            .order_by(Project.id)
            .limit(RESULT_LIMIT)
            .all()
        )
        users = (
            db.query(User)
            .filter(
                or_(
                    User.username.icontains(term, autoescape=True),
                    User.email.icontains(term, autoescape=True),
                )
            )
            .order_by(User.user_id)
            .limit(RESULT_LIMIT)
            .all()
        )
        logger.debug(
            "Search %r matched tasks=%d projects=%d users=%d", term, len(tasks), len(projects), len(users)
        )
        return SearchResult(
            tasks=rank(tasks, term, TASK_SCORED_FIELDS),
            projects=rank(projects, term, PROJECT_SCORED_FIELDS),
            users=rank(users, term, USER_SCORED_FIELDS),
        )


__all__ = [
    "EXACT_MATCH_SCORE",
    "MIN_QUERY_LENGTH",
    "PREFIX_MATCH_SCORE",
    "RESULT_LIMIT",
    "SUBSTRING_MATCH_SCORE",
    "SearchResult",
    "SearchService",
    "field_score",
    "normalize_query",
    "rank",
    "relevance_score",
]
