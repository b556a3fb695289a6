from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .database import Database
from .error_handling import register_exception_handlers
from .logging import configure_logging, get_logger, set_correlation_id
from .routers import auth, tasks, users
from .security import PasswordHasher, TokenIssuer
from .services.auth import AuthService
from .services.google import GoogleOAuthClient
from .services.sessions import SessionManager

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application and every component from one Settings object."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="Task Manager API",
        description="Multi-user task management API with local and Google sign-in",
        version="1.0.0",
    )

    database = Database(settings.database_url)
    sessions = SessionManager(
        settings.session_secret, timedelta(seconds=settings.session_max_age_seconds)
    )
    app.state.settings = settings
    app.state.database = database
    app.state.auth = AuthService(
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        tokens=TokenIssuer(
            settings.jwt_secret,
            timedelta(minutes=settings.access_token_expire_minutes),
            algorithm=settings.jwt_algorithm,
        ),
        sessions=sessions,
    )
    app.state.google = GoogleOAuthClient(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        cid = set_correlation_id(request.headers.get("X-Request-ID"))
        response = await call_next(request)
        response.headers["X-Request-ID"] = cid
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        return response

    register_exception_handlers(app, expose_details=not settings.is_production)

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(tasks.router, prefix="/api/task", tags=["tasks"])
    app.include_router(users.router, prefix="/api/user", tags=["users"])

    # Create tables on startup
    @app.on_event("startup")
    def on_startup():
        database.create_tables()
        logger.info("database_ready", environment=settings.environment)

    @app.get("/")
    def read_root():
        return {"message": "Task Manager API"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app
