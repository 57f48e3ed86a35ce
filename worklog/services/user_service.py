"""
User Service Module.
Onboarding and maintenance of Client and Developer accounts by a Business Analyst.
Accounts are never hard-deleted: deactivation flips their status to Inactive,
so hour logs and projects that reference them stay intact.
"""
import logging
from typing import List, Optional, Tuple, Type, Union

from sqlalchemy.orm import Session

from worklog.core.config import settings
from worklog.core.errors import conflict, not_found
from worklog.models.user import User, Client, Developer, AccountStatus
from worklog.repositories.user_repository import UserRepository
from worklog.schemas.user import ClientCreate, ClientUpdate, DeveloperCreate, DeveloperUpdate
from worklog.utils.hash import hash_password

logger = logging.getLogger(__name__)

Account = Union[Client, Developer]


class UserService:
    """Service for managing client and developer accounts."""

    @staticmethod
    def create_client(db: Session, data: ClientCreate, ba: User) -> Client:
        client = Client(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password or settings.DEFAULT_CLIENT_PASSWORD),
            billing_type=data.billing_type,
            status=AccountStatus.active,
            creating_user_id=ba.id,
        )
        return UserService._create(db, client)

    @staticmethod
    def create_developer(db: Session, data: DeveloperCreate, ba: User) -> Developer:
        developer = Developer(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password or settings.DEFAULT_DEVELOPER_PASSWORD),
            hourly_rate=data.hourly_rate,
            developer_role=data.developer_role,
            status=AccountStatus.active,
            creating_user_id=ba.id,
        )
        return UserService._create(db, developer)

    @staticmethod
    def _create(db: Session, account: Account) -> Account:
        users = UserRepository(db)
        if users.email_taken(account.email):
            raise conflict("Email already registered")
        users.create(account)
        db.commit()
        db.refresh(account)
        logger.info(
            "Onboarded %s id=%s by ba=%s",
            account.role.name, account.id, account.creating_user_id,
        )
        return account

    @staticmethod
    def list_accounts(
        db: Session,
        model: Type[Account],
        page: int,
        limit: int,
        status: Optional[AccountStatus] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Account], int]:
        return UserRepository(db).list_accounts(model, page, limit, status=status, search=search)

    @staticmethod
    def get_account(db: Session, model: Type[Account], account_id: int) -> Account:
        """Get a client or developer by ID. Inactive accounts still resolve."""
        users = UserRepository(db)
        account = (
            users.get_client(account_id) if model is Client else users.get_developer(account_id)
        )
        if account is None:
            raise not_found(model.__name__)
        return account

    @staticmethod
    def update_account(
        db: Session,
        model: Type[Account],
        account_id: int,
        data: Union[ClientUpdate, DeveloperUpdate],
    ) -> Account:
        account = UserService.get_account(db, model, account_id)
        changes = data.model_dump(exclude_unset=True)

        new_email = changes.get("email")
        if new_email and UserRepository(db).email_taken(new_email, exclude_id=account.id):
            raise conflict("Email already registered")

        for field, value in changes.items():
            if value is not None:
                setattr(account, field, value)
        db.commit()
        db.refresh(account)
        logger.info("Updated %s id=%s fields=%s", model.__name__, account.id, sorted(changes))
        return account

    @staticmethod
    def deactivate_account(db: Session, model: Type[Account], account_id: int) -> Account:
        account = UserService.get_account(db, model, account_id)
        account.status = AccountStatus.inactive
        db.commit()
        db.refresh(account)
        logger.info("Deactivated %s id=%s", model.__name__, account.id)
        return account
