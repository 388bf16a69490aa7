"""Main FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskboard.api.routes import router
from taskboard.config import get_settings
from taskboard.database import Base, engine
# Import models to register them with SQLAlchemy Base
from taskboard.models.audit import ChangeRecord, Revision  # noqa: F401
from taskboard.models.domain import Category, Comment, Note, Tag, Todo  # noqa: F401
from taskboard.services.errors import (
    AuthorizationError,
    DuplicateResourceError,
    EditWindowExpiredError,
    NotFoundError,
    PersistenceFailure,
    TaskboardError,
)

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("taskboard.api")

STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    EditWindowExpiredError: status.HTTP_403_FORBIDDEN,
    DuplicateResourceError: status.HTTP_409_CONFLICT,
    PersistenceFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title="Taskboard API",
    description="Todos, notes and comments with a change log for todos and capped revision history for notes.",
    version="0.1.0"
)

# Enable CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # For MVP - restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TaskboardError)
async def handle_taskboard_error(request: Request, exc: TaskboardError):
    """Render service errors as {code, message, details}."""
    status_code = STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if isinstance(exc, PersistenceFailure):
        logger.error(
            "%s %s failed to persist", request.method, request.url.path, exc_info=exc.__cause__ or exc
        )
        return JSONResponse(
            status_code=status_code,
            content={"code": exc.code, "message": "An unexpected error occurred", "details": {}},
        )
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code, "message": exc.message, "details": exc.details},
    )


# Include API routes
app.include_router(router, prefix="/api/v1", tags=["Taskboard"])


# Health check
@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "Taskboard API"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
