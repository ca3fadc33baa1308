"""
Repositorio para la entidad Propietario.
Gestiona todas las operaciones de base de datos relacionadas con propietarios.
"""

from typing import List, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import func

from repositories.base_repository import BaseRepository
from database.models import OwnerORM, PetORM
from core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)


class OwnerRepository(BaseRepository[OwnerORM]):
    """Repositorio para la entidad Propietario."""

    resource_name = "Propietario"

    def __init__(self, db: Session):
        super().__init__(db, OwnerORM)

    def find_by_last_name(
        self,
        last_name: str,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[OwnerORM], int]:
        """
        Busca propietarios cuyo apellido empieza por el texto dado.

        Un texto vacío devuelve todos los propietarios.

        Args:
            last_name: Prefijo del apellido
            skip: Número de registros a omitir
            limit: Número máximo de registros a devolver

        Returns:
            Tupla (propietarios de la página, total de coincidencias)
        """
        try:
            query = self.db.query(OwnerORM)
            if last_name:
                query = query.filter(OwnerORM.last_name.ilike(f"{last_name}%"))
            total = query.count()
            items = query.order_by(OwnerORM.last_name.asc(), OwnerORM.id.asc()).offset(skip).limit(limit).all()
            return items, total
        except SQLAlchemyError as e:
            logger.error(f"Error finding owners by last name {last_name}: {e}")
            raise DatabaseException("Error al buscar propietarios por apellido")

    def count_pets(self, owner_id: int) -> int:
        try:
            return self.db.query(func.count(PetORM.id)).filter(PetORM.owner_id == owner_id).scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Error counting pets of owner {owner_id}: {e}")
            raise DatabaseException("Error al contar mascotas del propietario")
