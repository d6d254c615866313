from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.orm import Session
from tasktimer.schemas.task import TaskCreate, TaskUpdate, TaskOut
from tasktimer.models import Task, TaskPriority, TaskStatus, User
from tasktimer.database import get_db
from tasktimer.errors import Forbidden, NotFound
from tasktimer.services.task_filter import filter_tasks
from tasktimer.utils.auth import get_current_user
from tasktimer.utils.clock import utcnow
from tasktimer.utils.logger import setup_logger

logger = setup_logger("tasks")

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _get_owned_task(task_id: int, user: User, db: Session) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise NotFound(f'Task with ID "{task_id}" not found')
    if task.user_id != user.id:
        raise Forbidden("Not allowed to access this task")
    return task


def _sync_completed_at(task: Task, previous_status: Optional[str]):
    if task.status == TaskStatus.DONE.value and previous_status != TaskStatus.DONE.value:
        task.completed_at = utcnow()
    elif task.status != TaskStatus.DONE.value:
        task.completed_at = None


@router.get("", response_model=list[TaskOut])
def list_tasks(
    search: Optional[str] = Query(None, description="Substring of title or description"),
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    category: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return filter_tasks(
        db,
        user,
        search=search,
        status=status.value if status else None,
        priority=priority.value if priority else None,
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.post("", response_model=TaskOut, status_code=201)
def create_task(task: TaskCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    new = Task(
        title=task.title,
        description=task.description,
        status=task.status.value,
        priority=task.priority.value,
        category=task.category,
        user_id=user.id,
    )
    _sync_completed_at(new, None)
    db.add(new)
    db.commit()
    db.refresh(new)
    logger.info("User %s created task %s", user.id, new.id)
    return new


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _get_owned_task(task_id, user, db)


@router.patch("/{task_id}", response_model=TaskOut)
def update_task(task_id: int, changes: TaskUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    task = _get_owned_task(task_id, user, db)
    previous_status = task.status
    for field, value in changes.changes().items():
        setattr(task, field, value)
    _sync_completed_at(task, previous_status)
    db.commit()
    db.refresh(task)
    logger.info("User %s updated task %s", user.id, task.id)
    return task


@router.delete("/{task_id}")
def delete_task(task_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    task = _get_owned_task(task_id, user, db)
    db.delete(task)
    db.commit()
    logger.info("User %s deleted task %s", user.id, task_id)
    return {"detail": "deleted"}
