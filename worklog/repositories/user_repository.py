"""User repository for database operations."""

from typing import Optional, List, Type, Tuple, Union
from sqlalchemy.orm import Session
from sqlalchemy import or_, func

from worklog.repositories.base_repository import BaseRepository
from worklog.models.user import User, Client, Developer, AccountStatus

Account = Union[Client, Developer]


class UserRepository(BaseRepository[User]):
    """Repository for the shared identity table and its role subtypes."""

    def __init__(self, db: Session):
        """
        Initialize UserRepository.

        Args:
            db: Database session
        """
        super().__init__(User, db)

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user of any role by email.

        Args:
            email: User email (compared lower-cased)

        Returns:
            User or None if not found
        """
        return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        """
        Check whether an email is already used by any account.

        Args:
            email: Email to check
            exclude_id: Optional user ID to ignore (the account being updated)

        Returns:
            True if another account owns the email
        """
        query = self.db.query(User.id).filter(func.lower(User.email) == email.lower())
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def get_client(self, client_id: int) -> Optional[Client]:
        """Get a client by ID, whatever its status."""
        return self.db.query(Client).filter(Client.id == client_id).first()

    def get_developer(self, developer_id: int) -> Optional[Developer]:
        """Get a developer by ID, whatever its status."""
        return self.db.query(Developer).filter(Developer.id == developer_id).first()

    def get_developers(self, developer_ids: List[int]) -> List[Developer]:
        """
        Get developers by ID.

        Args:
            developer_ids: Developer IDs

        Returns:
            Developers found; IDs of other roles or unknown IDs are absent
        """
        if not developer_ids:
            return []
        return (
            self.db.query(Developer)
            .filter(Developer.id.in_(set(developer_ids)))
            .order_by(Developer.id)
            .all()
        )

    def find_clients_by_name(self, name: str) -> List[Client]:
        """Exact-name lookup among clients."""
        return self.db.query(Client).filter(Client.name == name).all()

    def find_developers_by_name(self, name: str) -> List[Developer]:
        """Exact-name lookup among developers."""
        return self.db.query(Developer).filter(Developer.name == name).all()

    def list_accounts(
        self,
        model: Type[Account],
        page: int,
        limit: int,
        status: Optional[AccountStatus] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Account], int]:
        """
        List clients or developers.

        Args:
            model: Client or Developer
            page: 1-based page number
            limit: Page size
            status: Optional status filter
            search: Optional case-insensitive substring of name or email

        Returns:
            Tuple of (accounts on the page, total matching)
        """
        query = self.db.query(model)
        if status is not None:
            query = query.filter(model.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(func.lower(model.name).like(pattern), func.lower(model.email).like(pattern))
            )
        query = query.order_by(model.created_at.desc(), model.id.desc())
        return self.paginate(query, page, limit)

    def count_active(self, model: Type[Account]) -> int:
        """
        Count active clients or developers.

        Args:
            model: Client or Developer

        Returns:
            Number of active accounts
        """
        return (
            self.db.query(func.count(model.id))
            .filter(model.status == AccountStatus.active)
            .scalar()
        )
