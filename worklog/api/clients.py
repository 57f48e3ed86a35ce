from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from worklog.db.session import get_db
from worklog.core.security import get_current_user
from worklog.models.user import User, Client, AccountStatus
from worklog.schemas.user import ClientCreate, ClientUpdate, ClientOut
from worklog.services.permission_service import PermissionService, Resource, Action
from worklog.services.user_service import UserService
from worklog.utils.response import api_response, page_response, PageParams

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(
    data: ClientCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PermissionService.authorize(current_user, Resource.client, Action.create)
    client = UserService.create_client(db, data, current_user)
    return api_response(ClientOut.model_validate(client), "Client created successfully")


@router.get("")
def list_clients(
    params: PageParams = Depends(),
    status: Optional[AccountStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PermissionService.authorize(current_user, Resource.client, Action.list)
    clients, total = UserService.list_accounts(
        db, Client, params.page, params.limit, status=status, search=search
    )
    return page_response([ClientOut.model_validate(c) for c in clients], params, total)


@router.get("/{client_id}")
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PermissionService.authorize(current_user, Resource.client, Action.read)
    client = UserService.get_account(db, Client, client_id)
    return api_response(ClientOut.model_validate(client))


@router.put("/{client_id}")
def update_client(
    client_id: int,
    data: ClientUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PermissionService.authorize(current_user, Resource.client, Action.update)
    client = UserService.update_account(db, Client, client_id, data)
    return api_response(ClientOut.model_validate(client), "Client updated successfully")


@router.delete("/{client_id}")
def deactivate_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Soft delete: the client is marked Inactive and keeps its projects and hour logs."""
    PermissionService.authorize(current_user, Resource.client, Action.delete)
    client = UserService.deactivate_account(db, Client, client_id)
    return api_response(ClientOut.model_validate(client), "Client deactivated successfully")
