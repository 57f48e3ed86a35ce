from pydantic import BaseModel
from worklog.models.user import UserRole
from worklog.schemas.user import UserOut


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: UserRole


class LoginResult(BaseModel):
    token: str
    user: UserOut
