from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from tasktimer.database import Base
from tasktimer.utils.clock import utcnow

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False, index=True)
    username = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")
