from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from datetime import datetime
import re
from worklog.models.user import UserRole, AccountStatus, BillingType


PASSWORD_MIN_LENGTH = 8


def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name cannot be empty")
    return v


def _check_password(v: str) -> str:
    if len(v) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[A-Za-z]", v) or not re.search(r"\d", v):
        raise ValueError("Password must contain at least one letter and one number")
    return v


# Auth
class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str

    @validator("name")
    def validate_name(cls, v):
        return _clean_name(v)

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()

    @validator("password")
    def validate_password(cls, v):
        return _check_password(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserRef(BaseModel):
    """Minimal user reference embedded in other resources."""
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


# Clients
class ClientCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: Optional[str] = None
    billing_type: BillingType = BillingType.hourly

    @validator("name")
    def validate_name(cls, v):
        return _clean_name(v)

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()

    @validator("password")
    def validate_password(cls, v):
        if v is not None:
            return _check_password(v)
        return v


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    billing_type: Optional[BillingType] = None
    status: Optional[AccountStatus] = None

    @validator("name")
    def validate_name(cls, v):
        if v is not None:
            return _clean_name(v)
        return v

    @validator("email")
    def normalize_email(cls, v):
        if v is not None:
            return v.lower()
        return v


class ClientOut(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    billing_type: BillingType
    status: AccountStatus
    creating_user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Developers
class DeveloperCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: Optional[str] = None
    hourly_rate: float = Field(..., ge=0)
    developer_role: str = Field(..., min_length=1, max_length=100)

    @validator("name", "developer_role")
    def validate_text(cls, v):
        return _clean_name(v)

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()

    @validator("password")
    def validate_password(cls, v):
        if v is not None:
            return _check_password(v)
        return v


class DeveloperUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    developer_role: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[AccountStatus] = None

    @validator("name", "developer_role")
    def validate_text(cls, v):
        if v is not None:
            return _clean_name(v)
        return v

    @validator("email")
    def normalize_email(cls, v):
        if v is not None:
            return v.lower()
        return v


class DeveloperOut(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    hourly_rate: float
    developer_role: str
    status: AccountStatus
    creating_user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
