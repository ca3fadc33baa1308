"""
Repositorio para la entidad Mascota y su catálogo de tipos.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import PetORM, PetTypeORM
from core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)


class PetRepository(BaseRepository[PetORM]):
    """Repositorio para la entidad Mascota."""

    resource_name = "Mascota"

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de mascotas.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, PetORM)

    def find_by_owner(self, owner_id: int) -> List[PetORM]:
        """
        Busca todas las mascotas pertenecientes a un propietario.

        Args:
            owner_id: ID del propietario

        Returns:
            Lista de mascotas ordenada por nombre
        """
        try:
            return self.db.query(PetORM).filter(
                PetORM.owner_id == owner_id
            ).order_by(PetORM.name.asc(), PetORM.id.asc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Error finding pets by owner {owner_id}: {e}")
            raise DatabaseException("Error al buscar mascotas por propietario")

    def get_types(self) -> List[PetTypeORM]:
        try:
            return self.db.query(PetTypeORM).order_by(PetTypeORM.name.asc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing pet types: {e}")
            raise DatabaseException("Error al listar tipos de mascota")

    def get_type(self, type_id: int) -> Optional[PetTypeORM]:
        try:
            return self.db.get(PetTypeORM, type_id)
        except SQLAlchemyError as e:
            logger.error(f"Error getting pet type {type_id}: {e}")
            raise DatabaseException("Error al obtener tipo de mascota")
