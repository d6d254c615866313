"""
Dashboard aggregates: completed-task counts and logged seconds over the
current day, the current ISO week and all time, plus per-task totals.

Windows are computed in the configured TIMEZONE and converted to naive UTC
before querying. Running logs have no duration yet and add nothing.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tasktimer import config
from tasktimer.models import Task, TaskStatus, TimeLog, User
from tasktimer.utils.clock import utcnow


@dataclass(frozen=True)
class Window:
    """Naive-UTC bounds; ``end`` is inclusive for days, exclusive for weeks."""

    start: datetime
    end: datetime


def _to_utc(local: datetime) -> datetime:
    return local.astimezone(UTC).replace(tzinfo=None)


def _local_now(now: datetime) -> datetime:
    return now.replace(tzinfo=UTC).astimezone(ZoneInfo(config.TIMEZONE))


def day_window(now: datetime) -> Window:
    """00:00:00.000 through 23:59:59.999 of the local calendar day containing ``now``."""
    local = _local_now(now)
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1) - timedelta(milliseconds=1)
    return Window(_to_utc(start), _to_utc(end))


def week_window(now: datetime) -> Window:
    """Monday 00:00 (inclusive) to the following Monday 00:00 (exclusive)."""
    local = _local_now(now)
    monday = (local - timedelta(days=local.weekday())).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return Window(_to_utc(monday), _to_utc(monday + timedelta(days=7)))


def _seconds(db: Session, user: User, *criteria) -> int:
    stmt = select(func.coalesce(func.sum(TimeLog.duration), 0)).where(
        TimeLog.user_id == user.id, *criteria
    )
    return int(db.scalar(stmt))


def _task_count(db: Session, user: User, *criteria) -> int:
    stmt = select(func.count(Task.id)).where(Task.user_id == user.id, *criteria)
    return int(db.scalar(stmt))


def get_stats(db: Session, user: User, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    today = day_window(now)
    week = week_window(now)
    done = Task.status == TaskStatus.DONE.value

    return {
        "total_tasks": _task_count(db, user),
        "completed_tasks": _task_count(db, user, done),
        "completed_tasks_today": _task_count(
            db, user, done, Task.completed_at.between(today.start, today.end)
        ),
        "completed_tasks_week": _task_count(
            db, user, done, Task.completed_at >= week.start, Task.completed_at < week.end
        ),
        "total_seconds_today": _seconds(
            db, user, TimeLog.start_time.between(today.start, today.end)
        ),
        "total_seconds_week": _seconds(
            db, user, TimeLog.start_time >= week.start, TimeLog.start_time < week.end
        ),
        "total_seconds_all": _seconds(db, user),
    }


def get_total_time_for_all_tasks(db: Session, user: User) -> dict[int, int]:
    """Map task id -> logged seconds for every task with at least one log.

    Tasks without logs are absent; callers default to 0.
    """
    stmt = (
        select(TimeLog.task_id, func.coalesce(func.sum(TimeLog.duration), 0))
        .where(TimeLog.user_id == user.id)
        .group_by(TimeLog.task_id)
    )
    return {task_id: int(total) for task_id, total in db.execute(stmt)}
