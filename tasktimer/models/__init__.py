from tasktimer.models.user import User
from tasktimer.models.task import Task, TaskStatus, TaskPriority
from tasktimer.models.time_log import TimeLog

__all__ = ["User", "Task", "TaskStatus", "TaskPriority", "TimeLog"]
