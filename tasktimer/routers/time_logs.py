from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tasktimer.database import get_db
from tasktimer.models import User
from tasktimer.schemas.time_log import ActiveTimerOut, TaskTotalOut, TimeLogOut, TimerStart
from tasktimer.services import stats, timer
from tasktimer.utils.auth import get_current_user

router = APIRouter(prefix="/time-logs", tags=["time-logs"])


@router.post("/start", response_model=TimeLogOut, status_code=201)
def start_timer(body: TimerStart, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return timer.start_timer(db, user, body.task_id)


@router.post("/stop", response_model=TimeLogOut)
def stop_timer(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return timer.stop_timer(db, user)


@router.get("/active", response_model=Optional[ActiveTimerOut])
def active_timer(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return timer.get_active_timer(db, user)


@router.get("/task/{task_id}", response_model=list[TimeLogOut])
def logs_for_task(task_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return timer.get_logs_for_task(db, user, task_id)


@router.get("/task/{task_id}/total", response_model=TaskTotalOut)
def total_for_task(task_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return TaskTotalOut(task_id=task_id, total_seconds=timer.get_total_time_for_task(db, user, task_id))


@router.get("/totals", response_model=dict[int, int])
def totals(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return stats.get_total_time_for_all_tasks(db, user)
