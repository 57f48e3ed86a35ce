from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, ForeignKey
from sqlalchemy.sql import func
from worklog.db.session import Base
import enum


class UserRole(enum.IntEnum):
    ba = 0
    client = 1
    developer = 2


class AccountStatus(enum.Enum):
    active = "Active"
    inactive = "Inactive"


class BillingType(enum.Enum):
    hourly = "Hourly"
    fixed = "Fixed"


class User(Base):
    """
    Identity and credentials shared by every account.

    The role column is the polymorphic discriminator: each role is its own
    mapped class (BusinessAnalyst, Client, Developer) with its own table
    holding the role-specific, non-nullable fields.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(256), unique=True, index=True, nullable=False)
    password_hash = Column(String(512), nullable=False)
    role = Column(Enum(UserRole), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"polymorphic_on": role}

    @property
    def is_active(self) -> bool:
        # BAs have no status and are always active
        return getattr(self, "status", AccountStatus.active) == AccountStatus.active


class BusinessAnalyst(User):
    __tablename__ = "business_analysts"

    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    __mapper_args__ = {"polymorphic_identity": UserRole.ba}


class Client(User):
    __tablename__ = "clients"

    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    billing_type = Column(Enum(BillingType), nullable=False, default=BillingType.hourly)
    status = Column(Enum(AccountStatus), nullable=False, default=AccountStatus.active, index=True)
    creating_user_id = Column(Integer, ForeignKey("business_analysts.id"), nullable=False)

    __mapper_args__ = {"polymorphic_identity": UserRole.client}


class Developer(User):
    __tablename__ = "developers"

    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    hourly_rate = Column(Float, nullable=False)
    developer_role = Column(String(100), nullable=False)
    status = Column(Enum(AccountStatus), nullable=False, default=AccountStatus.active, index=True)
    creating_user_id = Column(Integer, ForeignKey("business_analysts.id"), nullable=False)

    __mapper_args__ = {"polymorphic_identity": UserRole.developer}
