"""
Service for staff account business logic.

Handles account creation and credential checks for the login endpoints.
"""

from typing import Optional
import logging

from services.base_service import BaseService
from repositories.user_repository import UserRepository
from database.models import UserORM
from database.db import hash_password, verify_password
from models.users import User, UserCreate
from core.exceptions import ConflictException

logger = logging.getLogger(__name__)


class UserService(BaseService[UserORM, UserRepository]):
    """Service for managing staff accounts."""

    def __init__(self, repository: UserRepository):
        super().__init__(repository)

    def create_user(self, data: UserCreate) -> User:
        """
        Create a new staff account.

        Raises:
            ConflictException: If username already exists
        """
        if self.repository.find_by_username(data.username) is not None:
            raise ConflictException(
                message=f"El usuario '{data.username}' ya existe",
                details={"field": "username"}
            )

        salt_hex, hash_hex = hash_password(data.password)

        user = UserORM(
            username=data.username,
            full_name=data.full_name,
            role=data.role.value,
            password_salt=salt_hex,
            password_hash=hash_hex,
        )

        created = self.repository.create(user)
        self.repository.commit()

        logger.info(f"User {created.id} ({created.username}) created with role {created.role}")

        return self.to_response_model(created)

    def authenticate(self, username: str, password: str) -> Optional[UserORM]:
        """Returns the account when the credentials match, None otherwise."""
        user = self.repository.find_by_username(username)
        if user is None:
            return None
        if not verify_password(user.password_salt, user.password_hash, password):
            logger.info(f"Failed login for {username}")
            return None
        return user

    def to_response_model(self, user: UserORM) -> User:
        return User(
            id=user.id,
            username=user.username,
            full_name=user.full_name,
            role=user.role,
            created_at=user.created_at,
        )
