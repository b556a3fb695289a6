from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they are registered with SQLModel metadata
from .models import Task, User, UserSession  # noqa: F401


def _create_engine(database_url: str):
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live on one connection; share it across threads.
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)

    # Postgres and friends: disable pooling for serverless and enable pre-ping
    return create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        poolclass=NullPool,
    )


class Database:
    """Engine and session factory for one configured store."""

    def __init__(self, database_url: str):
        self.engine = _create_engine(database_url)
        self.session_factory = sessionmaker(
            bind=self.engine,
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Get a database session (context manager style).

        This is a convenience function for use outside of FastAPI dependencies.
        Usage:
            with database.session() as db:
                # do something with db
        """
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def create_tables(self) -> None:
        """Create all database tables."""
        SQLModel.metadata.create_all(bind=self.engine)


def get_db(request: Request) -> Iterator[Session]:
    """Dependency to get database session."""
    with request.app.state.database.session() as db:
        yield db
