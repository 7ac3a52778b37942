"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ludicboard import __version__
from ludicboard.config import get_settings
from ludicboard.database import engine, init_db
from ludicboard.errors import register_exception_handlers
from ludicboard.logging_config import setup_logging
from ludicboard.routers import auth, projects, search, tasks, teams, users

logger = logging.getLogger("ludicboard.system")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    init_db()
    logger.info("LudicBoard API %s started", __version__)
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Every router is mounted under the configured API version prefix
    (``/api/v1`` by default).
    """
    settings = get_settings()
    setup_logging(
        log_dir=Path(settings.log_dir) if settings.log_dir else None,
        debug=settings.debug,
    )

    app = FastAPI(
        title="LudicBoard API",
        description="Projects, tasks, comments and team membership",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    api_version_path = settings.api_version_path
    app.include_router(auth.router, prefix=f"{api_version_path}/auth", tags=["auth"])
    app.include_router(projects.router, prefix=f"{api_version_path}/projects", tags=["projects"])
    app.include_router(tasks.router, prefix=f"{api_version_path}/tasks", tags=["tasks"])
    app.include_router(users.router, prefix=f"{api_version_path}/users", tags=["users"])
    app.include_router(teams.router, prefix=f"{api_version_path}/teams", tags=["teams"])
    app.include_router(search.router, prefix=f"{api_version_path}/search", tags=["search"])

    @app.get("/health", tags=["system"])
    def health() -> dict:
        """Liveness probe."""
        return {"status": "ok", "version": __version__}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "ludicboard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
