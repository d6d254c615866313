"""
Single-active-timer state machine.

Per user the timer is either Idle (no TimeLog with a null end_time) or
Running (exactly one). ``start_timer`` moves Idle -> Running, or swaps the
running log for a new one; ``stop_timer`` moves Running -> Idle.

Start and stop are read-then-write sequences, so each runs under a per-user
lock and inside one transaction. The active-row lookup uses
``SELECT ... FOR UPDATE`` where the backend supports it, and the partial
unique index on ``time_logs`` rejects a second running row from any other
process.
"""

import threading
import weakref
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from tasktimer.errors import Conflict, Forbidden, NotFound, ValidationError
from tasktimer.models import Task, TaskStatus, TimeLog, User
from tasktimer.utils.clock import utcnow
from tasktimer.utils.logger import setup_logger

logger = setup_logger("timer")

_locks_guard = threading.Lock()
# entries vanish once no request holds or waits on the lock
_user_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()


def _user_lock(user_id: int) -> threading.Lock:
    with _locks_guard:
        lock = _user_locks.get(user_id)
        if lock is None:
            lock = threading.Lock()
            _user_locks[user_id] = lock
        return lock


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds between two instants, truncated; never negative."""
    return max(0, (end - start) // timedelta(seconds=1))


def get_active_timer(db: Session, user: User) -> Optional[TimeLog]:
    stmt = (
        select(TimeLog)
        .options(joinedload(TimeLog.task))
        .where(TimeLog.user_id == user.id, TimeLog.end_time.is_(None))
    )
    return db.scalars(stmt).first()


def _lock_active(db: Session, user_id: int) -> Optional[TimeLog]:
    stmt = (
        select(TimeLog)
        .where(TimeLog.user_id == user_id, TimeLog.end_time.is_(None))
        .with_for_update()
    )
    return db.scalars(stmt).first()


def _close(log: TimeLog, now: datetime) -> TimeLog:
    log.end_time = now
    log.duration = elapsed_seconds(log.start_time, now)
    return log


def _owned_task(db: Session, user: User, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if task is None:
        raise NotFound(f'Task with ID "{task_id}" not found')
    if task.user_id != user.id:
        raise Forbidden("Not allowed to track time on this task")
    return task


def start_timer(db: Session, user: User, task_id: int) -> TimeLog:
    """Start a timer on ``task_id``, stopping the user's running timer first."""
    task = _owned_task(db, user, task_id)
    if task.status == TaskStatus.DONE.value:
        raise ValidationError("Cannot start a timer on a completed task")

    with _user_lock(user.id):
        try:
            now = utcnow()
            active = _lock_active(db, user.id)
            if active is not None:
                _close(active, now)
                # the update must reach the database before the insert
                db.flush()
                logger.info(
                    "Auto-stopped timer %s for user %s after %ss",
                    active.id, user.id, active.duration,
                )
            log = TimeLog(task_id=task.id, user_id=user.id, start_time=now)
            db.add(log)
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Concurrent timer start rejected for user %s", user.id)
            raise Conflict("Another timer was started concurrently")

    db.refresh(log)
    logger.info("Started timer %s on task %s for user %s", log.id, task.id, user.id)
    return log


def stop_timer(db: Session, user: User) -> TimeLog:
    """Stop the user's running timer. Raises NotFound when the user is idle."""
    with _user_lock(user.id):
        active = _lock_active(db, user.id)
        if active is None:
            raise NotFound("No active timer found")
        _close(active, utcnow())
        db.commit()

    db.refresh(active)
    logger.info("Stopped timer %s for user %s after %ss", active.id, user.id, active.duration)
    return active


def _check_task_access(db: Session, user: User, task_id: int):
    # a deleted or unknown task just has no logs; someone else's task is off limits
    task = db.get(Task, task_id)
    if task is not None and task.user_id != user.id:
        raise Forbidden("Not allowed to access this task")


def get_logs_for_task(db: Session, user: User, task_id: int) -> list[TimeLog]:
    """The user's logs for a task, newest first.

    Empty when the task has no logs or no longer exists; Forbidden when the
    task belongs to another user.
    """
    _check_task_access(db, user, task_id)
    stmt = (
        select(TimeLog)
        .where(TimeLog.task_id == task_id, TimeLog.user_id == user.id)
        .order_by(TimeLog.start_time.desc(), TimeLog.id.desc())
    )
    return list(db.scalars(stmt))


def get_total_time_for_task(db: Session, user: User, task_id: int) -> int:
    _check_task_access(db, user, task_id)
    stmt = select(func.coalesce(func.sum(TimeLog.duration), 0)).where(
        TimeLog.task_id == task_id, TimeLog.user_id == user.id
    )
    return int(db.scalar(stmt))
