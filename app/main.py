"""Planora API - Main Application Module.

This module initializes the FastAPI application with proper configuration,
middleware, routing, and lifecycle management for the project tracker.
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import ConfigValidator, get_config_summary, settings
from app.core.logging_config import configure_logging
from app.database import AsyncSessionLocal, engine
from models import Base

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifecycle events."""
    configure_logging(settings)
    ConfigValidator.validate_required_settings()
    logger.info("Starting %s %s (%s)", settings.app_name, settings.version, settings.environment.value)

    # Development mode: auto-create tables; elsewhere run `alembic upgrade head`
    if settings.is_development:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Development mode: database tables created/verified")

    yield

    logger.info("Shutting down %s", settings.app_name)
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Kanban/Scrum project tracker: projects, sprints, tasks and realtime boards",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware."""
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def error_envelope(
    request: Request,
    message: str,
    error_code: str,
    details=None,
) -> dict:
    return {
        "success": False,
        "message": message,
        "error": error_code,
        "details": details,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": getattr(request.state, "request_id", None),
    }


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(error_envelope(request, message, error_code, details)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Convert errors to JSON-serializable format
        errors = []
        for error in exc.errors():
            error_dict = {
                "loc": error.get("loc", []),
                "msg": str(error.get("msg", "Validation error")),
                "type": error.get("type", "value_error"),
            }
            if "input" in error:
                error_dict["input"] = str(error["input"])
            errors.append(error_dict)

        return JSONResponse(
            status_code=422,
            content=jsonable_encoder(
                error_envelope(request, "Validation error", "VALIDATION_ERROR", errors)
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled error on %s %s (request %s)",
            request.method,
            request.url.path,
            getattr(request.state, "request_id", None),
        )
        return JSONResponse(
            status_code=500,
            content=error_envelope(request, "Internal server error", "INTERNAL_ERROR"),
        )


def setup_routers(app: FastAPI):
    """Configure application routers."""
    # Import routers
    from app.domains.admin.controller import router as admin_router
    from app.domains.attachment.controller import router as attachment_router
    from app.domains.label.controller import router as label_router
    from app.domains.notification.controller import router as notification_router
    from app.domains.project.controller import router as project_router
    from app.domains.sprint.controller import router as sprint_router
    from app.domains.task.controller import router as task_router
    from app.domains.user.controller import router as user_router
    from app.realtime.controller import router as realtime_router

    @app.get("/health")
    async def health_check():
        """Health check endpoint reporting database reachability."""
        db_status = "healthy"
        try:
            async with AsyncSessionLocal() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:  # any failure means the database is unreachable
            logger.warning("Health check database query failed: %s", e)
            db_status = "unhealthy"

        return JSONResponse(
            status_code=200 if db_status == "healthy" else 503,
            content={
                "status": "healthy" if db_status == "healthy" else "degraded",
                "version": settings.version,
                "environment": settings.environment.value,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "services": {"database": db_status},
            },
        )

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        summary = get_config_summary()
        return {
            "name": summary["app_name"],
            "version": summary["version"],
            "description": "Kanban/Scrum project tracker",
            "docs_url": "/docs" if settings.is_development else None,
        }

    # Include domain routers
    app.include_router(user_router)
    app.include_router(project_router)
    app.include_router(task_router)
    app.include_router(sprint_router)
    app.include_router(label_router)
    app.include_router(attachment_router)
    app.include_router(notification_router)
    app.include_router(realtime_router)
    app.include_router(admin_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
