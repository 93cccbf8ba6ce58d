"""
Aggregation utilities.

Pure functions over already-fetched records: milestone progress, project
summaries, status/milestone grouping, and due-date labels. None of these
touch the store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from tracker.models.enums import DueKind, TaskStatus
from tracker.models.milestone import Milestone
from tracker.models.project import Project
from tracker.models.summary import (
    DueLabel,
    MilestoneProgress,
    MilestoneWithProgress,
    ProjectSummary,
    TaskBoard,
    TaskCard,
)
from tracker.models.task import Task
from tracker.utils.datetime_utils import get_user_today, ms_to_datetime


def milestone_progress(tasks: Iterable[Task]) -> MilestoneProgress:
    """Completion of a milestone's tasks; percent is 0 when there are none."""
    task_list = list(tasks)
    total = len(task_list)
    if total == 0:
        return MilestoneProgress(total=0, done=0, percent=0)
    done = sum(1 for task in task_list if task.status == TaskStatus.DONE)
    # halves round up (12.5 -> 13)
    percent = int(done * 100 / total + 0.5)
    return MilestoneProgress(total=total, done=done, percent=percent)


def project_summary(milestones: Iterable[Milestone], tasks: Iterable[Task]) -> ProjectSummary:
    """Counts for a project card plus the earliest milestone due date."""
    milestone_list = list(milestones)
    task_list = list(tasks)
    due_dates = [m.due_date for m in milestone_list if m.due_date is not None]
    return ProjectSummary(
        milestone_count=len(milestone_list),
        task_count=len(task_list),
        done_task_count=sum(1 for task in task_list if task.status == TaskStatus.DONE),
        next_due=min(due_dates) if due_dates else None,
    )


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """Partition tasks into the four status buckets, keeping input order."""
    grouped: dict[TaskStatus, list[Task]] = {status: [] for status in TaskStatus}
    for task in tasks:
        grouped[task.status].append(task)
    return grouped


def group_by_milestone(tasks: Iterable[Task]) -> dict[UUID, list[Task]]:
    grouped: dict[UUID, list[Task]] = {}
    for task in tasks:
        grouped.setdefault(task.milestone_id, []).append(task)
    return grouped


def summarize_projects(
    projects: Iterable[Project],
    milestones: Iterable[Milestone],
    tasks: Iterable[Task],
) -> dict[UUID, ProjectSummary]:
    """Build a summary per project from flat milestone and task lists."""
    milestones_by_project: dict[UUID, list[Milestone]] = {}
    for milestone in milestones:
        milestones_by_project.setdefault(milestone.project_id, []).append(milestone)
    tasks_by_project: dict[UUID, list[Task]] = {}
    for task in tasks:
        tasks_by_project.setdefault(task.project_id, []).append(task)
    return {
        project.id: project_summary(
            milestones_by_project.get(project.id, []),
            tasks_by_project.get(project.id, []),
        )
        for project in projects
    }


def due_label(
    timestamp_ms: int,
    user_timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> DueLabel:
    """
    Label a due date by calendar day in the viewer's timezone.

    Days are compared rather than raw milliseconds, so a task due at 09:00
    today is "due today" even at 17:00.

    Args:
        timestamp_ms: Due date as epoch milliseconds
        user_timezone: IANA timezone defining "local midnight"
        now: Reference instant, defaults to the current time

    Returns:
        DueLabel with kind OVERDUE, DUE_TODAY or DUE_ON
    """
    due_day = ms_to_datetime(timestamp_ms, user_timezone).date()
    today = get_user_today(user_timezone, now)
    if due_day < today:
        kind = DueKind.OVERDUE
    elif due_day == today:
        kind = DueKind.DUE_TODAY
    else:
        kind = DueKind.DUE_ON
    return DueLabel(kind=kind, day=due_day)


def optional_due_label(
    timestamp_ms: Optional[int],
    user_timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> Optional[DueLabel]:
    if timestamp_ms is None:
        return None
    return due_label(timestamp_ms, user_timezone, now)


def milestones_with_progress(
    milestones: Iterable[Milestone],
    tasks: Iterable[Task],
    user_timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> list[MilestoneWithProgress]:
    """Milestone cards in display order with progress and due labels."""
    tasks_by_milestone = group_by_milestone(tasks)
    return [
        MilestoneWithProgress(
            milestone=milestone,
            progress=milestone_progress(tasks_by_milestone.get(milestone.id, [])),
            due_label=optional_due_label(milestone.due_date, user_timezone, now),
        )
        for milestone in sorted(milestones, key=lambda m: (m.order_index, m.created_at))
    ]


def task_board(
    tasks: Iterable[Task],
    user_timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> TaskBoard:
    """Status columns of task cards for a milestone board."""
    return TaskBoard(
        columns={
            status: [
                TaskCard(task=task, due_label=optional_due_label(task.due_date, user_timezone, now))
                for task in bucket
            ]
            for status, bucket in group_by_status(tasks).items()
        }
    )
