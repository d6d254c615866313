from tasktimer.schemas.base import CamelModel


class DashboardStats(CamelModel):
    total_tasks: int
    completed_tasks: int
    completed_tasks_today: int
    completed_tasks_week: int
    total_seconds_today: int
    total_seconds_week: int
    total_seconds_all: int
