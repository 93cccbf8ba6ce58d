"""
Unit tests for the SQLite project, milestone and task repositories.
"""

from uuid import uuid4

import pytest
from sqlalchemy import event

from tracker.core.exceptions import InfrastructureError, NotFoundError
from tracker.infrastructure.local.database import chunked, unique_ids
from tracker.infrastructure.local.project_repository import SqliteProjectRepository
from tracker.models.enums import MilestoneStatus, ProjectStatus, TaskPriority, TaskStatus
from tracker.models.milestone import MilestoneCreate, MilestoneUpdate
from tracker.models.project import ProjectCreate, ProjectUpdate
from tracker.models.task import TaskCreate, TaskUpdate


@pytest.fixture
def select_counter(engine):
    """Count SELECT statements sent to the database."""
    statements: list[str] = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            statements.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", before_cursor_execute)
    yield statements
    event.remove(engine.sync_engine, "before_cursor_execute", before_cursor_execute)


async def _project(project_repo, owner_id="test_user", name="Project"):
    return await project_repo.create(owner_id, ProjectCreate(name=name))


async def _milestone(milestone_repo, project_id, name="Milestone", due_date=None):
    return await milestone_repo.create(MilestoneCreate(project_id=project_id, name=name, due_date=due_date))


async def _task(task_repo, milestone, title="Task", assignee_id=None):
    return await task_repo.create(
        TaskCreate(
            project_id=milestone.project_id,
            milestone_id=milestone.id,
            title=title,
            assignee_id=assignee_id,
        )
    )


# ============================================
# Helpers
# ============================================


def test_chunked_splits_into_bounded_batches():
    batches = list(chunked(range(25), 10))

    assert [len(batch) for batch in batches] == [10, 10, 5]


def test_unique_ids_keeps_first_seen_order():
    first, second = uuid4(), uuid4()

    assert unique_ids([first, second, first]) == [str(first), str(second)]


# ============================================
# Projects
# ============================================


@pytest.mark.asyncio
async def test_create_project(project_repo, test_user_id):
    """Test creating a project."""
    project = await project_repo.create(
        test_user_id, ProjectCreate(name="Launch", description="Ship it")
    )

    assert project.id is not None
    assert project.owner_id == test_user_id
    assert project.status == ProjectStatus.ACTIVE
    assert project.created_at == project.updated_at
    assert project.created_at > 0


@pytest.mark.asyncio
async def test_get_missing_project_returns_none(project_repo):
    assert await project_repo.get_by_id(uuid4()) is None


@pytest.mark.asyncio
async def test_list_projects_by_owner(project_repo, test_user_id):
    await _project(project_repo, test_user_id, "Mine 1")
    await _project(project_repo, test_user_id, "Mine 2")
    await _project(project_repo, "someone_else", "Theirs")

    projects = await project_repo.list_by_owner(test_user_id)

    assert {p.name for p in projects} == {"Mine 1", "Mine 2"}


@pytest.mark.asyncio
async def test_update_project(project_repo):
    """Test updating a project."""
    project = await _project(project_repo)

    updated = await project_repo.update(
        project.id, ProjectUpdate(name="Renamed", status=ProjectStatus.ON_HOLD)
    )

    assert updated.name == "Renamed"
    assert updated.status == ProjectStatus.ON_HOLD
    assert updated.updated_at >= project.updated_at


@pytest.mark.asyncio
async def test_update_project_clears_description(project_repo, test_user_id):
    project = await project_repo.create(test_user_id, ProjectCreate(name="P", description="old"))

    updated = await project_repo.update(project.id, ProjectUpdate(description=None))

    assert updated.description is None
    assert updated.name == "P"


@pytest.mark.asyncio
async def test_update_missing_project_raises(project_repo):
    with pytest.raises(NotFoundError):
        await project_repo.update(uuid4(), ProjectUpdate(name="Nope"))


@pytest.mark.asyncio
async def test_delete_project_is_idempotent(project_repo):
    project = await _project(project_repo)

    assert await project_repo.delete(project.id) is True
    assert await project_repo.delete(project.id) is False
    assert await project_repo.get_by_id(project.id) is None


@pytest.mark.asyncio
async def test_get_by_ids_batches_queries(project_repo, select_counter):
    projects = [await _project(project_repo, name=f"P{i}") for i in range(25)]
    requested = [p.id for p in projects] + [projects[0].id, uuid4()]
    select_counter.clear()

    found = await project_repo.get_by_ids(requested)

    assert len(select_counter) == 3
    assert set(found) == {p.id for p in projects}


@pytest.mark.asyncio
async def test_get_by_ids_respects_batch_size(session_factory, realtime, select_counter):
    repo = SqliteProjectRepository(session_factory=session_factory, realtime=realtime, batch_size=4)
    projects = [await _project(repo, name=f"P{i}") for i in range(9)]
    select_counter.clear()

    found = await repo.get_by_ids([p.id for p in projects])

    assert len(select_counter) == 3
    assert len(found) == 9


@pytest.mark.asyncio
async def test_get_by_ids_empty_issues_no_query(project_repo, select_counter):
    assert await project_repo.get_by_ids([]) == {}
    assert select_counter == []


@pytest.mark.asyncio
async def test_store_failure_raises_infrastructure_error(project_repo, engine):
    async with engine.begin() as conn:
        await conn.exec_driver_sql("DROP TABLE projects")

    with pytest.raises(InfrastructureError):
        await project_repo.list_by_owner("test_user")


# ============================================
# Milestones
# ============================================


@pytest.mark.asyncio
async def test_milestone_order_index_is_creation_count(project_repo, milestone_repo):
    project = await _project(project_repo)

    first = await _milestone(milestone_repo, project.id, "M0")
    second = await _milestone(milestone_repo, project.id, "M1")
    third = await _milestone(milestone_repo, project.id, "M2")

    assert [first.order_index, second.order_index, third.order_index] == [0, 1, 2]
    assert first.status == MilestoneStatus.NOT_STARTED


@pytest.mark.asyncio
async def test_milestone_order_index_not_renumbered_after_delete(project_repo, milestone_repo):
    project = await _project(project_repo)
    first = await _milestone(milestone_repo, project.id, "M0")
    second = await _milestone(milestone_repo, project.id, "M1")
    await _milestone(milestone_repo, project.id, "M2")

    await milestone_repo.delete(second.id)
    fourth = await _milestone(milestone_repo, project.id, "M3")

    milestones = await milestone_repo.list_by_project(project.id)
    assert fourth.order_index == 2
    assert milestones[0].id == first.id
    assert [m.order_index for m in milestones] == [0, 2, 2]
    assert {m.name for m in milestones} == {"M0", "M2", "M3"}


@pytest.mark.asyncio
async def test_milestone_order_index_is_per_project(project_repo, milestone_repo):
    first_project = await _project(project_repo, name="A")
    second_project = await _project(project_repo, name="B")
    await _milestone(milestone_repo, first_project.id)

    other = await _milestone(milestone_repo, second_project.id)

    assert other.order_index == 0


@pytest.mark.asyncio
async def test_update_milestone_clears_due_date(project_repo, milestone_repo):
    project = await _project(project_repo)
    milestone = await _milestone(milestone_repo, project.id, due_date=1_700_000_000_000)

    updated = await milestone_repo.update(
        milestone.id, MilestoneUpdate(due_date=None, status=MilestoneStatus.IN_PROGRESS)
    )

    assert updated.due_date is None
    assert updated.status == MilestoneStatus.IN_PROGRESS
    assert updated.order_index == milestone.order_index


# ============================================
# Tasks
# ============================================


@pytest.mark.asyncio
async def test_create_task_defaults(project_repo, milestone_repo, task_repo):
    project = await _project(project_repo)
    milestone = await _milestone(milestone_repo, project.id)

    task = await _task(task_repo, milestone)

    assert task.status == TaskStatus.BACKLOG
    assert task.priority == TaskPriority.MEDIUM
    assert task.project_id == project.id
    assert task.milestone_id == milestone.id


@pytest.mark.asyncio
async def test_list_tasks_by_scope(project_repo, milestone_repo, task_repo, test_user_id):
    project = await _project(project_repo)
    first = await _milestone(milestone_repo, project.id, "M0")
    second = await _milestone(milestone_repo, project.id, "M1")
    await _task(task_repo, first, "A", assignee_id=test_user_id)
    await _task(task_repo, first, "B")
    await _task(task_repo, second, "C", assignee_id=test_user_id)

    assert len(await task_repo.list_by_project(project.id)) == 3
    assert {t.title for t in await task_repo.list_by_milestone(first.id)} == {"A", "B"}
    assert {t.title for t in await task_repo.list_by_assignee(test_user_id)} == {"A", "C"}


@pytest.mark.asyncio
async def test_task_updates_are_last_write_wins(project_repo, milestone_repo, task_repo):
    project = await _project(project_repo)
    milestone = await _milestone(milestone_repo, project.id)
    task = await _task(task_repo, milestone)

    await task_repo.update(task.id, TaskUpdate(status=TaskStatus.IN_PROGRESS, title="First"))
    await task_repo.update(task.id, TaskUpdate(status=TaskStatus.DONE))

    stored = await task_repo.get_by_id(task.id)
    assert stored.status == TaskStatus.DONE
    assert stored.title == "First"


@pytest.mark.asyncio
async def test_update_task_explicit_none_title_is_ignored(project_repo, milestone_repo, task_repo):
    project = await _project(project_repo)
    milestone = await _milestone(milestone_repo, project.id)
    task = await _task(task_repo, milestone, assignee_id="someone")

    updated = await task_repo.update(task.id, TaskUpdate(title=None, assignee_id=None))

    assert updated.title == "Task"
    assert updated.assignee_id is None


@pytest.mark.asyncio
async def test_update_deleted_task_raises(project_repo, milestone_repo, task_repo):
    project = await _project(project_repo)
    milestone = await _milestone(milestone_repo, project.id)
    task = await _task(task_repo, milestone)
    await task_repo.delete(task.id)

    with pytest.raises(NotFoundError):
        await task_repo.update(task.id, TaskUpdate(status=TaskStatus.DONE))


# ============================================
# Change notifications
# ============================================


@pytest.mark.asyncio
async def test_watch_by_milestone_receives_snapshots(project_repo, milestone_repo, task_repo, realtime):
    project = await _project(project_repo)
    milestone = await _milestone(milestone_repo, project.id)
    snapshots: list[list] = []

    async def on_snapshot(snapshot):
        snapshots.append(snapshot)

    subscription = await task_repo.watch_by_milestone(milestone.id, on_snapshot)
    task = await _task(task_repo, milestone)
    await task_repo.update(task.id, TaskUpdate(status=TaskStatus.DONE))
    await task_repo.delete(task.id)

    assert [len(s) for s in snapshots] == [0, 1, 1, 0]
    assert snapshots[2][0].status == TaskStatus.DONE

    subscription.cancel()
    await _task(task_repo, milestone)
    assert len(snapshots) == 4
    assert realtime.active_count() == 0


@pytest.mark.asyncio
async def test_noop_delete_does_not_notify(project_repo, realtime):
    snapshots: list[list] = []

    async def on_snapshot(snapshot):
        snapshots.append(snapshot)

    subscription = await project_repo.watch_by_owner("test_user", on_snapshot)
    await project_repo.delete(uuid4())

    assert len(snapshots) == 1
    subscription.cancel()
