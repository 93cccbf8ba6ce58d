"""
Shared pytest fixtures.

Every test gets its own SQLite file and its own live-query manager so
subscriptions never leak between tests.
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from tracker.infrastructure.local.database import get_session_factory, init_db
from tracker.infrastructure.local.milestone_repository import SqliteMilestoneRepository
from tracker.infrastructure.local.project_repository import SqliteProjectRepository
from tracker.infrastructure.local.task_repository import SqliteTaskRepository
from tracker.interfaces.auth_provider import User
from tracker.services.cascade_service import CascadeDeletionService
from tracker.services.realtime_service import RealtimeManager
from tracker.services.session import SessionContext


@pytest.fixture
async def engine(tmp_path):
    """Create a file-backed SQLite engine with all tables."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def realtime():
    return RealtimeManager()


@pytest.fixture
def project_repo(session_factory, realtime):
    return SqliteProjectRepository(session_factory=session_factory, realtime=realtime)


@pytest.fixture
def milestone_repo(session_factory, realtime):
    return SqliteMilestoneRepository(session_factory=session_factory, realtime=realtime)


@pytest.fixture
def task_repo(session_factory, realtime):
    return SqliteTaskRepository(session_factory=session_factory, realtime=realtime)


@pytest.fixture
def cascade(project_repo, milestone_repo, task_repo):
    return CascadeDeletionService(project_repo, milestone_repo, task_repo)


@pytest.fixture
def test_user_id():
    return "test_user"


@pytest.fixture
def test_user(test_user_id):
    return User(id=test_user_id, email="test@example.com", display_name="Test User")


@pytest.fixture
def session(test_user):
    return SessionContext(test_user)
