from sqlalchemy import Column, Integer, ForeignKey, DateTime, Index, text
from sqlalchemy.orm import relationship
from tasktimer.database import Base


class TimeLog(Base):
    __tablename__ = "time_logs"
    __table_args__ = (
        # at most one running timer per user
        Index(
            "ix_time_logs_one_active_per_user",
            "user_id",
            unique=True,
            sqlite_where=text("end_time IS NULL"),
            postgresql_where=text("end_time IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    # whole seconds, set together with end_time
    duration = Column(Integer, nullable=True)

    task = relationship("Task", back_populates="time_logs")
