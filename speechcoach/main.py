from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from speechcoach.config import get_settings
from speechcoach.core.exceptions import (
    DatabaseConnectionException,
    EntityNotFoundException,
    RepositoryException,
)
from speechcoach.core.logging import configure_logging

# IMPORT ROUTERS
from speechcoach.routers.health import router as health_router
from speechcoach.routers.skills import router as skills_router
from speechcoach.routers.evaluations import router as evaluations_router

load_dotenv()

settings = get_settings()
configure_logging(settings)
logger = structlog.get_logger(__name__)


# SWAGGER UI - tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Skills"},
    {"name": "Evaluation Scoring"},
]

# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


# EXCEPTION HANDLERS
def _error_body(error: str, message: str) -> dict:
    return {
        "error": error,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.exception_handler(EntityNotFoundException)
async def not_found_handler(request: Request, exc: EntityNotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_error_body("Not Found", str(exc)))


@app.exception_handler(DatabaseConnectionException)
async def connection_handler(request: Request, exc: DatabaseConnectionException):
    logger.error("database_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body("Service Unavailable", str(exc)),
    )


@app.exception_handler(RepositoryException)
async def repository_handler(request: Request, exc: RepositoryException):
    logger.error("repository_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal Server Error", str(exc)),
    )


# REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
app.include_router(health_router)           # Health
app.include_router(skills_router)           # Skills
app.include_router(evaluations_router)      # Evaluation Scoring


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "speechcoach.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
