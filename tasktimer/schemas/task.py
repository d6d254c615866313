from datetime import datetime
from typing import Optional

from pydantic import field_validator

from tasktimer.models.task import TaskPriority, TaskStatus
from tasktimer.schemas.base import CamelModel


def _clean_title(v: str) -> str:
    if not v.strip():
        raise ValueError("title cannot be empty")
    return v.strip()


class TaskCreate(CamelModel):
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    category: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v):
        return _clean_title(v)


class TaskUpdate(CamelModel):
    """Partial update: only the fields present in the request body are applied.

    Presence is tracked by pydantic (``model_fields_set``), so an omitted field
    is left untouched while an explicit ``null`` clears description/category.
    Title, status and priority cannot be cleared.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    category: Optional[str] = None

    @field_validator("title", "status", "priority")
    @classmethod
    def not_null(cls, v, info):
        # only runs for fields the client actually sent
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        if info.field_name == "title":
            return _clean_title(v)
        return v

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, mode="json")


class TaskOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    category: Optional[str] = None
    priority: TaskPriority
    user_id: int
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
