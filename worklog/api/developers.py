from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from worklog.db.session import get_db
from worklog.core.security import get_current_user
from worklog.models.user import User, Developer, AccountStatus
from worklog.schemas.user import DeveloperCreate, DeveloperUpdate, DeveloperOut
from worklog.services.permission_service import PermissionService, Resource, Action
from worklog.services.user_service import UserService
from worklog.utils.response import api_response, page_response, PageParams

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_developer(
    data: DeveloperCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PermissionService.authorize(current_user, Resource.developer, Action.create)
    developer = UserService.create_developer(db, data, current_user)
    return api_response(DeveloperOut.model_validate(developer), "Developer created successfully")


@router.get("")
def list_developers(
    params: PageParams = Depends(),
    status: Optional[AccountStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PermissionService.authorize(current_user, Resource.developer, Action.list)
    developers, total = UserService.list_accounts(
        db, Developer, params.page, params.limit, status=status, search=search
    )
    return page_response([DeveloperOut.model_validate(d) for d in developers], params, total)


@router.get("/{developer_id}")
def get_developer(
    developer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PermissionService.authorize(current_user, Resource.developer, Action.read)
    developer = UserService.get_account(db, Developer, developer_id)
    return api_response(DeveloperOut.model_validate(developer))


@router.put("/{developer_id}")
def update_developer(
    developer_id: int,
    data: DeveloperUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PermissionService.authorize(current_user, Resource.developer, Action.update)
    developer = UserService.update_account(db, Developer, developer_id, data)
    return api_response(DeveloperOut.model_validate(developer), "Developer updated successfully")


@router.delete("/{developer_id}")
def deactivate_developer(
    developer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Soft delete: the developer is marked Inactive and keeps project memberships and hour logs."""
    PermissionService.authorize(current_user, Resource.developer, Action.delete)
    developer = UserService.deactivate_account(db, Developer, developer_id)
    return api_response(DeveloperOut.model_validate(developer), "Developer deactivated successfully")
