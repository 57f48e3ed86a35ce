from sqlalchemy import Column, Integer, String, Text, Float, Date, DateTime, ForeignKey, Enum, Table
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from worklog.db.session import Base
import enum


class TaskStatus(enum.Enum):
    todo = "Todo"
    in_progress = "In Progress"
    review = "Review"
    completed = "Completed"
    blocked = "Blocked"


class TaskPriority(enum.Enum):
    low = "Low"
    medium = "Medium"
    high = "High"
    urgent = "Urgent"


task_assignees = Table(
    "task_assignees",
    Base.metadata,
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("developer_id", Integer, ForeignKey("developers.id"), primary_key=True),
)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    status = Column(Enum(TaskStatus), nullable=False, default=TaskStatus.todo, index=True)
    priority = Column(Enum(TaskPriority), nullable=False, default=TaskPriority.medium, index=True)
    estimated_hours = Column(Float, nullable=True)
    actual_hours = Column(Float, nullable=False, default=0.0, server_default="0")
    start_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship("Project", back_populates="tasks")
    creator = relationship("User", foreign_keys=[created_by])
    assignees = relationship("Developer", secondary=task_assignees, order_by="Developer.id")

    @property
    def assignee_ids(self) -> set:
        return {developer.id for developer in self.assignees}

    @property
    def project_name(self):
        return self.project.name if self.project else None
