from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Date,
    DateTime,
    ForeignKey,
    Index,
    CheckConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from worklog.db.session import Base


class HourLog(Base):
    """Append-only fact: hours a developer worked for a client on a project (and task)."""
    __tablename__ = "hour_logs"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    developer_id = Column(Integer, ForeignKey("developers.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=True, index=True)
    date = Column(Date, nullable=False)
    hours = Column(Float, nullable=False)
    description = Column(String(500), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("hours > 0 AND hours <= 24", name="ck_hour_logs_hours_range"),
        Index("ix_hour_logs_client_date", "client_id", "date"),
        Index("ix_hour_logs_developer_date", "developer_id", "date"),
        Index("ix_hour_logs_date", "date"),
        Index("ix_hour_logs_created_by", "created_by"),
    )

    # Relationships
    client = relationship("Client", foreign_keys=[client_id])
    developer = relationship("Developer", foreign_keys=[developer_id])
    project = relationship("Project", foreign_keys=[project_id])
    task = relationship("Task", foreign_keys=[task_id])
    creator = relationship("User", foreign_keys=[created_by])

    @property
    def client_name(self):
        return self.client.name if self.client else None

    @property
    def developer_name(self):
        return self.developer.name if self.developer else None

    @property
    def project_name(self):
        return self.project.name if self.project else None

    @property
    def task_title(self):
        return self.task.title if self.task else None
