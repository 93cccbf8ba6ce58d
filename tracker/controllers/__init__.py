"""Page view-state controllers."""

from tracker.controllers.base import PageController, PagePhase
from tracker.controllers.milestone_board import MilestoneBoardController
from tracker.controllers.my_tasks import MyTasksController
from tracker.controllers.project_detail import ProjectDetailController
from tracker.controllers.projects import ProjectListController

__all__ = [
    "PageController",
    "PagePhase",
    "ProjectListController",
    "ProjectDetailController",
    "MilestoneBoardController",
    "MyTasksController",
]
