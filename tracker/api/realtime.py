"""
Server-sent event streams backed by live queries.

Each stream opens repository subscriptions when the client starts reading
and forwards every snapshot as one event until the connection closes.
"""

import asyncio
import json
from typing import AsyncGenerator, Awaitable, Callable
from uuid import UUID

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from tracker.api.deps import CurrentUser, MilestoneRepo, ProjectRepo, TaskRepo
from tracker.api.permissions import require_project_owner
from tracker.core.config import get_settings
from tracker.core.logger import setup_logger
from tracker.services.realtime_service import Subscription

logger = setup_logger(__name__)

router = APIRouter()


Opener = Callable[[asyncio.Queue], Awaitable[list[Subscription]]]


def _event(kind: str, snapshot: list[BaseModel]) -> str:
    payload = {
        "type": kind,
        "items": [item.model_dump(mode="json") for item in snapshot],
    }
    return json.dumps(payload)


def _forward(queue: asyncio.Queue, kind: str):
    async def on_snapshot(snapshot: list[BaseModel]) -> None:
        await queue.put(_event(kind, snapshot))

    return on_snapshot


def _stream(request: Request, open_subscriptions: Opener) -> StreamingResponse:
    """Live queries are opened on the first read and released when the stream closes."""
    keepalive = get_settings().REALTIME_KEEPALIVE_SECONDS

    async def event_generator() -> AsyncGenerator[str, None]:
        queue: asyncio.Queue = asyncio.Queue()
        subscriptions = await open_subscriptions(queue)
        try:
            yield 'data: {"type":"connected"}\n\n'
            while True:
                if await request.is_disconnected():
                    break
                try:
                    data = await asyncio.wait_for(queue.get(), timeout=keepalive)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield f"data: {data}\n\n"
        finally:
            for subscription in subscriptions:
                subscription.cancel()
            logger.debug("Released %d live queries", len(subscriptions))

    return StreamingResponse(event_generator(), media_type="text/event-stream")


@router.get("/my-tasks/stream")
async def stream_my_tasks(
    user: CurrentUser,
    request: Request,
    task_repo: TaskRepo,
) -> StreamingResponse:
    """Stream the tasks assigned to the current user."""

    async def open_subscriptions(queue: asyncio.Queue) -> list[Subscription]:
        return [await task_repo.watch_by_assignee(user.id, _forward(queue, "tasks"))]

    return _stream(request, open_subscriptions)


@router.get("/projects/{project_id}/stream")
async def stream_project(
    project_id: UUID,
    user: CurrentUser,
    request: Request,
    project_repo: ProjectRepo,
    milestone_repo: MilestoneRepo,
    task_repo: TaskRepo,
) -> StreamingResponse:
    """Stream a project's milestones and tasks."""
    await require_project_owner(user, project_id, project_repo)

    async def open_subscriptions(queue: asyncio.Queue) -> list[Subscription]:
        milestones = await milestone_repo.watch_by_project(project_id, _forward(queue, "milestones"))
        try:
            tasks = await task_repo.watch_by_project(project_id, _forward(queue, "tasks"))
        except Exception:
            milestones.cancel()
            raise
        return [milestones, tasks]

    return _stream(request, open_subscriptions)
