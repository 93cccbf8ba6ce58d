"""
Unit tests for the personal task board.
"""

from unittest.mock import AsyncMock

import pytest

from tests.factories import FIXED_NOW, make_milestone, make_project, make_task
from tracker.core.exceptions import ForbiddenError
from tracker.models.enums import TaskStatus
from tracker.services.my_tasks_service import (
    MILESTONE_PLACEHOLDER,
    PROJECT_PLACEHOLDER,
    MyTasksService,
)


@pytest.fixture
def records():
    project = make_project(owner_id="owner", name="Website")
    milestone = make_milestone(project.id, name="Beta")
    tasks = [
        make_task(project.id, milestone.id, TaskStatus.IN_PROGRESS, assignee_id="test_user"),
        make_task(project.id, milestone.id, TaskStatus.DONE, assignee_id="test_user"),
    ]
    return project, milestone, tasks


def _service(tasks, projects, milestones):
    task_repo = AsyncMock()
    task_repo.list_by_assignee.return_value = tasks
    project_repo = AsyncMock()
    project_repo.get_by_ids.return_value = projects
    milestone_repo = AsyncMock()
    milestone_repo.get_by_ids.return_value = milestones
    return MyTasksService(task_repo, project_repo, milestone_repo)


@pytest.mark.asyncio
async def test_load_resolves_names(records):
    project, milestone, tasks = records
    service = _service(tasks, {project.id: project}, {milestone.id: milestone})

    board = await service.load("test_user", "UTC", FIXED_NOW)

    assert board.total == 2
    card = board.columns[TaskStatus.IN_PROGRESS][0]
    assert card.project_name == "Website"
    assert card.milestone_name == "Beta"
    service.task_repo.list_by_assignee.assert_awaited_once_with("test_user")
    service.project_repo.get_by_ids.assert_awaited_once_with({project.id})


@pytest.mark.asyncio
async def test_denied_project_lookup_falls_back_to_placeholder(records):
    project, milestone, tasks = records
    service = _service(tasks, {}, {milestone.id: milestone})
    service.project_repo.get_by_ids.side_effect = ForbiddenError("not a member")

    board = await service.load("test_user")

    card = board.columns[TaskStatus.DONE][0]
    assert card.project_name == PROJECT_PLACEHOLDER
    assert card.milestone_name == "Beta"


@pytest.mark.asyncio
async def test_missing_milestone_uses_placeholder(records):
    project, _, tasks = records
    service = _service(tasks, {project.id: project}, {})

    board = await service.load("test_user")

    assert board.columns[TaskStatus.IN_PROGRESS][0].milestone_name == MILESTONE_PLACEHOLDER


@pytest.mark.asyncio
async def test_empty_task_list_skips_lookups():
    service = _service([], {}, {})

    board = await service.load("test_user")

    assert board.total == 0
    service.project_repo.get_by_ids.assert_not_awaited()
    service.milestone_repo.get_by_ids.assert_not_awaited()
