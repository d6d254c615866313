from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from tasktimer.errors import ValidationError
from tasktimer.models import Task, User

SORTABLE_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "completedAt": Task.completed_at,
    "title": Task.title,
    "status": Task.status,
    "priority": Task.priority,
    "category": Task.category,
}
# snake_case spellings are accepted as well
SORTABLE_FIELDS.update({col.key: col for col in list(SORTABLE_FIELDS.values())})


def filter_tasks(
    db: Session,
    user: User,
    search: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
) -> list[Task]:
    """Return the user's tasks matching every given filter, sorted on one key.

    ``search`` is a substring match on title or description using the
    database's default collation. ``sort_order`` is ASC or DESC (default
    DESC, case-insensitive). Rows with equal sort keys come back in
    unspecified order.
    """
    column = SORTABLE_FIELDS.get(sort_by or "createdAt")
    if column is None:
        raise ValidationError(f"Cannot sort by '{sort_by}'")

    stmt = select(Task).where(Task.user_id == user.id)
    if status:
        stmt = stmt.where(Task.status == status)
    if priority:
        stmt = stmt.where(Task.priority == priority)
    if category:
        stmt = stmt.where(Task.category == category)
    if search:
        # autoescape keeps % and _ in the search text literal
        stmt = stmt.where(or_(
            Task.title.contains(search, autoescape=True),
            Task.description.contains(search, autoescape=True),
        ))

    ascending = (sort_order or "").upper() == "ASC"
    stmt = stmt.order_by(column.asc() if ascending else column.desc())
    return list(db.scalars(stmt))
