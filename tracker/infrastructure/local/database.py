"""
SQLite database configuration and ORM models.

Each collection is a flat table. Parent references are plain columns with
no foreign keys, so cascades are the caller's job.
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator, Iterable, Iterator, TypeVar
from uuid import uuid4

from sqlalchemy import BigInteger, Column, Integer, String, Text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from tracker.core.config import get_settings
from tracker.core.exceptions import InfrastructureError

T = TypeVar("T")

PROJECTS = "projects"
MILESTONES = "milestones"
TASKS = "tasks"


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class ProjectORM(Base):
    """Project ORM model."""

    __tablename__ = PROJECTS

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    owner_id = Column(String(255), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="ACTIVE")
    created_at = Column(BigInteger, nullable=False, index=True)
    updated_at = Column(BigInteger, nullable=False)


class MilestoneORM(Base):
    """Milestone ORM model."""

    __tablename__ = MILESTONES

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    project_id = Column(String(36), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="NOT_STARTED")
    order_index = Column(Integer, nullable=False, default=0)
    due_date = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)


class TaskORM(Base):
    """Task ORM model."""

    __tablename__ = TASKS

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    project_id = Column(String(36), nullable=False, index=True)
    milestone_id = Column(String(36), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="BACKLOG", index=True)
    priority = Column(String(10), default="MEDIUM")
    assignee_id = Column(String(255), nullable=True, index=True)
    due_date = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)


# ===========================================
# Database Session Management
# ===========================================


@lru_cache()
def get_engine() -> AsyncEngine:
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)


def get_session_factory(engine: AsyncEngine | None = None):
    """Get async session factory."""
    return sessionmaker(engine or get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine | None = None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def store_session(session_factory) -> AsyncIterator[AsyncSession]:
    """Open a session, re-raising store failures as InfrastructureError."""
    try:
        async with session_factory() as session:
            yield session
    except SQLAlchemyError as exc:
        raise InfrastructureError("Document store operation failed", details=str(exc)) from exc


def chunked(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """Split items into lists of at most ``size`` elements."""
    batch: list[T] = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


def unique_ids(ids: Iterable) -> list[str]:
    """Stringify and de-duplicate IDs, keeping first-seen order."""
    return list(dict.fromkeys(str(value) for value in ids))
