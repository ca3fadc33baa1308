"""
Repositorio para las cuentas del personal.
"""

from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import UserORM
from core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[UserORM]):
    """Repositorio para la gestión de cuentas de usuario."""

    resource_name = "Usuario"

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de usuarios.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, UserORM)

    def find_by_username(self, username: str) -> Optional[UserORM]:
        """
        Busca un usuario por username.

        Returns:
            UserORM o None si no se encuentra
        """
        try:
            return self.db.query(UserORM).filter(
                UserORM.username == username
            ).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error finding user by username {username}: {e}")
            raise DatabaseException("Error al buscar usuario por username")
