"""
API tests against the FastAPI app with repositories bound to the test database.
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from main import create_app
from tracker.api import deps
from tracker.core.exceptions import CascadeDeleteError
from tracker.infrastructure.auth.mock_auth import MockAuthProvider

OWNER = {"Authorization": "Bearer test_user"}
OTHER = {"Authorization": "Bearer other_user"}


@pytest.fixture
def app(project_repo, milestone_repo, task_repo):
    app = create_app()
    app.dependency_overrides[deps.get_project_repository] = lambda: project_repo
    app.dependency_overrides[deps.get_milestone_repository] = lambda: milestone_repo
    app.dependency_overrides[deps.get_task_repository] = lambda: task_repo
    app.dependency_overrides[deps.get_auth_provider] = lambda: MockAuthProvider()
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _create_tree(client):
    project = (await client.post("/api/projects", json={"name": "Launch"}, headers=OWNER)).json()
    milestone = (
        await client.post(
            "/api/milestones",
            json={"project_id": project["id"], "name": "Beta"},
            headers=OWNER,
        )
    ).json()
    task = (
        await client.post(
            "/api/tasks",
            json={
                "project_id": project["id"],
                "milestone_id": milestone["id"],
                "title": "Write copy",
                "assignee_id": "other_user",
            },
            headers=OWNER,
        )
    ).json()
    return project, milestone, task


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_me_requires_token(client):
    assert (await client.get("/api/auth/me")).status_code == 401
    assert (await client.get("/api/auth/me", headers={"Authorization": "Basic abc"})).status_code == 401

    response = await client.get("/api/auth/me", headers=OWNER)

    assert response.status_code == 200
    assert response.json()["id"] == "test_user"


# ============================================
# Projects
# ============================================


@pytest.mark.asyncio
async def test_project_crud(client):
    created = await client.post("/api/projects", json={"name": "Launch"}, headers=OWNER)
    assert created.status_code == 201
    project_id = created.json()["id"]

    listed = await client.get("/api/projects", headers=OWNER)
    assert [p["id"] for p in listed.json()] == [project_id]

    patched = await client.patch(
        f"/api/projects/{project_id}", json={"status": "ON_HOLD"}, headers=OWNER
    )
    assert patched.status_code == 200
    assert patched.json()["status"] == "ON_HOLD"
    assert patched.json()["name"] == "Launch"


@pytest.mark.asyncio
async def test_project_validation(client):
    response = await client.post("/api/projects", json={"name": ""}, headers=OWNER)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_project_access_is_owner_only(client):
    project, _, _ = await _create_tree(client)

    assert (await client.get(f"/api/projects/{project['id']}", headers=OTHER)).status_code == 403
    assert (await client.get(f"/api/projects/{uuid4()}", headers=OWNER)).status_code == 404
    assert (await client.get("/api/projects", headers=OTHER)).json() == []


@pytest.mark.asyncio
async def test_project_summaries(client):
    project, _, _ = await _create_tree(client)

    response = await client.get("/api/projects/summaries", headers=OWNER)

    assert response.status_code == 200
    body = response.json()
    assert body[0]["project"]["id"] == project["id"]
    assert body[0]["summary"]["milestone_count"] == 1
    assert body[0]["summary"]["task_count"] == 1
    assert body[0]["next_due_label"] is None

    summary = await client.get(f"/api/projects/{project['id']}/summary", headers=OWNER)
    assert summary.json()["done_task_count"] == 0


@pytest.mark.asyncio
async def test_delete_project_cascades(client):
    project, milestone, task = await _create_tree(client)

    response = await client.delete(f"/api/projects/{project['id']}", headers=OWNER)

    assert response.status_code == 200
    assert response.json()["tasks_deleted"] == 1
    assert response.json()["milestones_deleted"] == 1
    assert response.json()["project_deleted"] is True
    assert (await client.get(f"/api/milestones/{milestone['id']}", headers=OWNER)).status_code == 404
    assert (await client.get(f"/api/tasks/{task['id']}", headers=OWNER)).status_code == 404

    again = await client.delete(f"/api/projects/{project['id']}", headers=OWNER)
    assert again.status_code == 200
    assert again.json()["project_deleted"] is False
    assert again.json()["tasks_deleted"] == 0


@pytest.mark.asyncio
async def test_failed_cascade_returns_service_unavailable(app, client):
    project, _, _ = await _create_tree(client)
    cascade = AsyncMock()
    cascade.delete_project_cascade.side_effect = CascadeDeleteError(
        "Failed to delete 1 of 1 tasks", failed_ids=["x"], stage="tasks"
    )
    app.dependency_overrides[deps.get_cascade_service] = lambda: cascade

    response = await client.delete(f"/api/projects/{project['id']}", headers=OWNER)

    assert response.status_code == 503
    assert response.json()["details"] == {"failed_ids": ["x"], "stage": "tasks"}


# ============================================
# Milestones
# ============================================


@pytest.mark.asyncio
async def test_milestones_list_and_progress(client):
    project, milestone, task = await _create_tree(client)
    await client.patch(f"/api/tasks/{task['id']}", json={"status": "DONE"}, headers=OWNER)

    listed = await client.get("/api/milestones", params={"project_id": project["id"]}, headers=OWNER)
    assert [m["order_index"] for m in listed.json()] == [0]

    progress = await client.get(f"/api/milestones/{milestone['id']}/progress", headers=OWNER)
    assert progress.json() == {"total": 1, "done": 1, "percent": 100}

    cards = await client.get(f"/api/milestones/project/{project['id']}/progress", headers=OWNER)
    assert cards.json()[0]["progress"]["percent"] == 100


@pytest.mark.asyncio
async def test_milestone_due_label_in_requested_timezone(client):
    project, _, _ = await _create_tree(client)
    # 2020-01-01 20:00 UTC, long past in every timezone
    await client.post(
        "/api/milestones",
        json={"project_id": project["id"], "name": "Old", "due_date": 1577908800000},
        headers=OWNER,
    )

    response = await client.get(
        f"/api/milestones/project/{project['id']}/progress",
        params={"tz": "Asia/Tokyo"},
        headers=OWNER,
    )

    label = response.json()[1]["due_label"]
    assert label["kind"] == "OVERDUE"
    assert label["day"] == "2020-01-02"
    assert label["text"] == "Overdue • 2020-01-02"


@pytest.mark.asyncio
async def test_unknown_timezone_is_rejected(client):
    project, _, _ = await _create_tree(client)

    response = await client.get(
        f"/api/milestones/project/{project['id']}/progress",
        params={"tz": "Mars/Olympus"},
        headers=OWNER,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_milestone_cascades(client):
    project, milestone, task = await _create_tree(client)

    response = await client.delete(f"/api/milestones/{milestone['id']}", headers=OWNER)

    assert response.json()["tasks_deleted"] == 1
    assert response.json()["milestone_deleted"] is True
    assert (await client.get(f"/api/projects/{project['id']}", headers=OWNER)).status_code == 200
    assert (await client.get(f"/api/tasks/{task['id']}", headers=OWNER)).status_code == 404

    again = await client.delete(f"/api/milestones/{milestone['id']}", headers=OWNER)
    assert again.status_code == 200
    assert again.json()["milestone_deleted"] is False


@pytest.mark.asyncio
async def test_stranger_cannot_delete_existing_milestone(client):
    _, milestone, _ = await _create_tree(client)

    response = await client.delete(f"/api/milestones/{milestone['id']}", headers=OTHER)

    assert response.status_code == 403
    assert (await client.get(f"/api/milestones/{milestone['id']}", headers=OWNER)).status_code == 200


# ============================================
# Tasks
# ============================================


@pytest.mark.asyncio
async def test_task_must_match_milestone_project(client):
    _, milestone, _ = await _create_tree(client)
    other = (await client.post("/api/projects", json={"name": "Other"}, headers=OWNER)).json()

    response = await client.post(
        "/api/tasks",
        json={"project_id": other["id"], "milestone_id": milestone["id"], "title": "Lost"},
        headers=OWNER,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_tasks_requires_scope(client):
    assert (await client.get("/api/tasks", headers=OWNER)).status_code == 400


@pytest.mark.asyncio
async def test_board_and_my_tasks(client):
    _, milestone, task = await _create_tree(client)

    board = await client.get(f"/api/tasks/board/{milestone['id']}", headers=OWNER)
    assert set(board.json()["columns"]) == {"BACKLOG", "IN_PROGRESS", "BLOCKED", "DONE"}
    assert board.json()["columns"]["BACKLOG"][0]["task"]["id"] == task["id"]

    mine = await client.get("/api/tasks/mine", headers=OTHER)
    card = mine.json()["columns"]["BACKLOG"][0]
    assert card["project_name"] == "Launch"
    assert card["milestone_name"] == "Beta"

    assert (await client.get("/api/tasks/mine", headers=OWNER)).json()["columns"]["BACKLOG"] == []


@pytest.mark.asyncio
async def test_assignee_can_update_but_not_see_project(client):
    project, _, task = await _create_tree(client)

    updated = await client.patch(
        f"/api/tasks/{task['id']}", json={"status": "IN_PROGRESS"}, headers=OTHER
    )

    assert updated.status_code == 200
    assert updated.json()["status"] == "IN_PROGRESS"
    assert (await client.get(f"/api/projects/{project['id']}", headers=OTHER)).status_code == 403

    stranger = {"Authorization": "Bearer stranger"}
    assert (await client.get(f"/api/tasks/{task['id']}", headers=stranger)).status_code == 403


@pytest.mark.asyncio
async def test_delete_task(client):
    _, milestone, task = await _create_tree(client)

    response = await client.delete(f"/api/tasks/{task['id']}", headers=OWNER)

    assert response.status_code == 204
    listed = await client.get("/api/tasks", params={"milestone_id": milestone["id"]}, headers=OWNER)
    assert listed.json() == []


@pytest.mark.asyncio
async def test_deleting_a_task_twice_succeeds(client):
    _, _, task = await _create_tree(client)

    first = await client.delete(f"/api/tasks/{task['id']}", headers=OWNER)
    second = await client.delete(f"/api/tasks/{task['id']}", headers=OWNER)

    assert first.status_code == 204
    assert second.status_code == 204
