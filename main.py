"""FastAPI application entrypoint for VoiceMentor.

Serves the user, mentor and session REST surface plus the interactive
workspace (gamification, chat, live feed) of this process.
"""
import sys

# Ensure UTF-8 encoding
if sys.stdout:
    sys.stdout.reconfigure(encoding='utf-8')

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid

from app.api.responses import fail
from app.api.routes import router
from app.api.workspace import router as workspace_router
from app.core.logging import get_logger, setup_logging
from app.core.config import Settings, settings as default_settings
from app.domain.mentor import Mentor, default_mentors
from app.domain.session import Session
from app.domain.user import User
from app.infrastructure.kv_store import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from app.infrastructure.redis import create_redis_client
from app.infrastructure.repositories import InMemoryRepository, RedisRepository
from app.infrastructure.scheduler import AsyncioScheduler, Scheduler
from app.services.mentorship import MentorService, SessionService, UserService
from app.services.workspace import Workspace

logger = get_logger(__name__)

# Application metadata
APP_VERSION = "1.0.0"
APP_NAME = "VoiceMentor"


def _build_storage(settings: Settings, kv_store: Optional[KeyValueStore]):
    """Repositories and key-value store for the configured backend.

    A Redis backend that cannot be reached falls back to memory.
    """
    redis_client = None
    if settings.storage_backend == "redis":
        redis_client = create_redis_client(settings)
        if redis_client is None:
            logger.warning("Redis unavailable, falling back to in-memory storage")

    if redis_client is not None:
        repos = (
            RedisRepository(User, redis_client, "users"),
            RedisRepository(Mentor, redis_client, "mentors"),
            RedisRepository(Session, redis_client, "sessions"),
        )
        kv_store = kv_store or RedisKeyValueStore(redis_client)
        backend = "redis"
    else:
        repos = (InMemoryRepository(), InMemoryRepository(), InMemoryRepository())
        kv_store = kv_store or InMemoryKeyValueStore()
        backend = "memory"
    return repos, kv_store, backend


def create_app(
    settings: Optional[Settings] = None,
    kv_store: Optional[KeyValueStore] = None,
    scheduler: Optional[Scheduler] = None,
) -> FastAPI:
    """Build the application with its services and workspace.

    Args:
        settings: Configuration (defaults to the process settings)
        kv_store: Store for persisted workspace slices (defaults per backend)
        scheduler: Timer source for the workspace (defaults to the event loop)
    """
    settings = settings or default_settings

    # Initialize structured logging
    setup_logging(level=settings.log_level, json_format=settings.environment == "production")

    app = FastAPI(
        title=APP_NAME,
        description="Voice-first mentorship for learners and mentors",
        version=APP_VERSION,
        docs_url="/docs" if settings.environment != "production" else None,  # Disable in prod
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    (user_repo, mentor_repo, session_repo), kv_store, backend = _build_storage(settings, kv_store)
    app.state.settings = settings
    app.state.storage_backend = backend
    app.state.users = UserService(user_repo)
    app.state.mentors = MentorService(mentor_repo)
    app.state.sessions = SessionService(session_repo)
    app.state.mentors.seed(default_mentors())
    app.state.workspace = Workspace(kv_store, scheduler or AsyncioScheduler(), settings=settings)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every request with timing and status code."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        request_logger = get_logger(__name__, {"request_id": request_id})

        start_time = time.time()

        request_logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000

            request_logger.info(
                f"Request completed: {request.method} {request.url.path}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            request_logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": round(duration_ms, 2),
                    "error": str(e),
                },
                exc_info=True
            )
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "message": "Internal server error",
                    "error": str(e),
                    "request_id": request_id,
                }
            )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies and parameters get the 400 envelope."""
        logger.warning(
            f"Invalid request: {request.method} {request.url.path}",
            extra={"request_id": getattr(request.state, "request_id", None), "path": request.url.path},
        )
        return fail(400, "Invalid request data", str(exc.errors()))

    @app.on_event("startup")
    async def startup_event():
        logger.info("Application starting up", extra={"version": APP_VERSION})
        app.state.workspace.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Application shutting down")
        app.state.workspace.shutdown()

    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(workspace_router, prefix=settings.api_prefix)

    @app.get("/")
    def root():
        """Root endpoint with basic service info."""
        return {
            "service": APP_NAME,
            "version": APP_VERSION,
            "status": "running",
            "environment": settings.environment
        }

    @app.get("/health")
    def health_check():
        """Liveness check."""
        return {
            "status": "OK",
            "message": "VoiceMentor API is running",
            "version": APP_VERSION,
            "checks": {
                "api": "ok",
                "storage": app.state.storage_backend,
            }
        }

    @app.get(f"{settings.api_prefix}/ping")
    def ping():
        return {"success": True, "message": "pong"}

    return app


app = create_app()
