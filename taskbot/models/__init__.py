"""Model modules."""
from taskbot.models.task import Task, TaskStatus, ProgressUpdate
from taskbot.models.directory import DirectoryUser, Favorite
from taskbot.models.installation import Installation

__all__ = [
    "Task",
    "TaskStatus",
    "ProgressUpdate",
    "DirectoryUser",
    "Favorite",
    "Installation",
]
