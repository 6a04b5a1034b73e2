from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean, UniqueConstraint
from sqlalchemy.sql import func
from app.db.base_class import Base


class UserRoadmap(Base):
    """A user has started a roadmap."""

    __tablename__ = "user_roadmaps"
    __table_args__ = (UniqueConstraint("user_id", "roadmap_id", name="uq_user_roadmap"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    roadmap_id = Column(Integer, ForeignKey("roadmaps.id", ondelete="CASCADE"), nullable=False, index=True)
    started_at = Column(DateTime, default=func.now())
    completed_at = Column(DateTime, nullable=True)


class UserProgress(Base):
    """Row exists with completed=True iff the user has finished the task."""

    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "task_id", name="uq_user_task"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    completed = Column(Boolean, nullable=False, default=True)
    completed_at = Column(DateTime, nullable=True)
