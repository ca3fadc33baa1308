"""
Repositorio para la entidad Visita.
"""

from typing import List
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import VisitORM
from core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)


class VisitRepository(BaseRepository[VisitORM]):
    """Repositorio para la entidad Visita."""

    resource_name = "Visita"

    def __init__(self, db: Session):
        super().__init__(db, VisitORM)

    def find_by_pet(self, pet_id: int) -> List[VisitORM]:
        """
        Historial de visitas de una mascota, la más reciente primero.

        Args:
            pet_id: ID de la mascota
        """
        try:
            return self.db.query(VisitORM).filter(
                VisitORM.pet_id == pet_id
            ).order_by(VisitORM.visit_date.desc(), VisitORM.id.desc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Error finding visits by pet {pet_id}: {e}")
            raise DatabaseException("Error al buscar visitas por mascota")
