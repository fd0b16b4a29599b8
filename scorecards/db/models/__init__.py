# scorecards/db/models/__init__.py

from .department import Department
from .user import User
from .task import Task, TaskStatus

__all__ = [
    "Department",
    "User",
    "Task",
    "TaskStatus",
]
# The task/user/department tables are owned by the workspace application;
# these mappings are used read-only by the scorecard engine.
