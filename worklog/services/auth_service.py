"""
Authentication Service Module.
Handles first-run registration and credential checks.
Following architectural rules: stateless, uses repositories for data access.
"""
import logging
from typing import Tuple

from sqlalchemy.orm import Session

from worklog.core.errors import forbidden, unauthenticated, conflict
from worklog.core.security import create_access_token
from worklog.models.user import User, BusinessAnalyst
from worklog.repositories.user_repository import UserRepository
from worklog.utils.hash import hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """Service for managing authentication."""

    @staticmethod
    def register_first_ba(db: Session, name: str, email: str, password: str) -> BusinessAnalyst:
        """
        Register the first Business Analyst.

        Self-registration only exists to bootstrap an empty installation;
        once any account exists, new accounts are onboarded by a BA.
        """
        users = UserRepository(db)
        if users.count() > 0:
            raise forbidden("Registration is closed. Ask a Business Analyst for an account.")
        if users.email_taken(email):
            raise conflict("Email already registered")

        ba = BusinessAnalyst(name=name, email=email, password_hash=hash_password(password))
        users.create(ba)
        db.commit()
        db.refresh(ba)
        logger.info("Bootstrapped first business analyst id=%s", ba.id)
        return ba

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user with email and password.

        Returns:
            Tuple of (user, access token)
        """
        user = UserRepository(db).get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt for %s", email)
            raise unauthenticated("Invalid credentials")
        if not user.is_active:
            raise forbidden("Account is inactive. Contact your Business Analyst.")

        access_token = create_access_token({"sub": str(user.id), "role": user.role})
        return user, access_token
