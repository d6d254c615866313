import enum

from sqlalchemy import Column, Integer, String, ForeignKey, Text, DateTime
from sqlalchemy.orm import relationship
from tasktimer.database import Base
from tasktimer.utils.clock import utcnow


class TaskStatus(str, enum.Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    # stored as plain strings so filters compare against the API values directly
    status = Column(String, nullable=False, default=TaskStatus.TODO.value, index=True)
    category = Column(String, nullable=True)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    # set when status becomes DONE, cleared when it leaves DONE
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="tasks")
    time_logs = relationship("TimeLog", back_populates="task", cascade="all, delete-orphan")
