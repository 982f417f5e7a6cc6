import uuid

from sqlalchemy import Column, String, Uuid, Boolean, ForeignKey

from househeroes.db_models.base import Base, UTCDateTime, utc_now


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Uuid, primary_key=True, index=True, default=uuid.uuid4)
    family_id = Column(Uuid, ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    created_by_id = Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    due_date = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(UTCDateTime, nullable=True)


class TaskAssignment(Base):
    __tablename__ = "task_assignments"

    task_id = Column(Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
