from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Float,
    Date,
    DateTime,
    ForeignKey,
    Enum,
    Table,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from worklog.db.session import Base
from worklog.models.user import BillingType
import enum


class ProjectStatus(enum.Enum):
    planning = "Planning"
    active = "Active"
    on_hold = "On Hold"
    completed = "Completed"
    cancelled = "Cancelled"


# Composite primary key gives set semantics: a developer is on a project at most once
project_developers = Table(
    "project_developers",
    Base.metadata,
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("developer_id", Integer, ForeignKey("developers.id"), primary_key=True),
)


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    status = Column(Enum(ProjectStatus), nullable=False, default=ProjectStatus.planning, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    estimated_hours = Column(Float, nullable=True)
    # Running total, only ever changed through an atomic SQL increment
    actual_hours = Column(Float, nullable=False, default=0.0, server_default="0")
    hourly_rate = Column(Float, nullable=True)
    billing_type = Column(Enum(BillingType), nullable=False, default=BillingType.hourly)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Import reconciliation upserts on this key
    __table_args__ = (UniqueConstraint("name", "client_id", name="uq_projects_name_client"),)

    # Relationships
    client = relationship("Client", foreign_keys=[client_id])
    creator = relationship("User", foreign_keys=[created_by])
    developers = relationship("Developer", secondary=project_developers, order_by="Developer.id")
    tasks = relationship("Task", back_populates="project")

    @property
    def developer_ids(self) -> set:
        return {developer.id for developer in self.developers}
