from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm
from worklog.db.session import get_db
from worklog.models.user import User
from worklog.schemas.user import RegisterRequest, LoginRequest, UserOut
from worklog.schemas.token import Token, LoginResult
from worklog.services.auth_service import AuthService
from worklog.core.security import get_current_user
from worklog.core.rate_limit import limiter
from worklog.utils.response import api_response

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit("3/hour")
def register(request: Request, data: RegisterRequest, db: Session = Depends(get_db)):
    """Create the first Business Analyst. Closed once any account exists."""
    ba = AuthService.register_first_ba(db, data.name, data.email, data.password)
    return api_response(UserOut.model_validate(ba), "Business Analyst registered successfully")


@router.post("/login")
@limiter.limit("10/minute")
def login(request: Request, data: LoginRequest, db: Session = Depends(get_db)):
    user, token = AuthService.authenticate_user(db, data.email, data.password)
    return api_response(
        LoginResult(token=token, user=UserOut.model_validate(user)), "Login successful"
    )


@router.post("/token", response_model=Token)
@limiter.limit("10/minute")
def token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """OAuth2 password flow, used by the interactive docs."""
    user, access_token = AuthService.authenticate_user(db, form_data.username, form_data.password)
    return Token(access_token=access_token, token_type="bearer", role=user.role)


@router.get("/me")
@limiter.limit("30/minute")
def get_me(request: Request, current_user: User = Depends(get_current_user)):
    return api_response(UserOut.model_validate(current_user))
