"""
Repositorio para la entidad Veterinario.
"""

from typing import List
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import VetORM, SpecialtyORM
from core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)


class VetRepository(BaseRepository[VetORM]):
    """Repositorio para la entidad Veterinario."""

    resource_name = "Veterinario"

    def __init__(self, db: Session):
        super().__init__(db, VetORM)

    def get_all(self, skip: int = 0, limit: int = 100, **kwargs) -> List[VetORM]:
        """Veterinarios ordenados por apellido y nombre."""
        try:
            return self.db.query(VetORM).order_by(
                VetORM.last_name.asc(), VetORM.first_name.asc(), VetORM.id.asc()
            ).offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting all vets: {e}")
            raise DatabaseException("Error al listar veterinarios")

    def get_or_create_specialties(self, names: List[str]) -> List[SpecialtyORM]:
        """
        Devuelve las especialidades con los nombres dados, creando las que falten.

        Args:
            names: Nombres de especialidad (se ignoran duplicados y vacíos)
        """
        result = []
        try:
            for name in dict.fromkeys(n.strip() for n in names if n and n.strip()):
                specialty = self.db.query(SpecialtyORM).filter(SpecialtyORM.name == name).one_or_none()
                if specialty is None:
                    specialty = SpecialtyORM(name=name)
                    self.db.add(specialty)
                result.append(specialty)
            return result
        except SQLAlchemyError as e:
            logger.error(f"Error resolving specialties {names}: {e}")
            raise DatabaseException("Error al registrar especialidades")
