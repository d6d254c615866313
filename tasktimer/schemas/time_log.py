from datetime import datetime
from typing import Optional

from tasktimer.schemas.base import CamelModel
from tasktimer.schemas.task import TaskOut


class TimerStart(CamelModel):
    task_id: int


class TimeLogOut(CamelModel):
    id: int
    task_id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None


class ActiveTimerOut(TimeLogOut):
    task: TaskOut


class TaskTotalOut(CamelModel):
    task_id: int
    total_seconds: int
