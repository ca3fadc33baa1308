"""
Repositorio base con operaciones CRUD comunes:
Este repositorio genérico proporciona operaciones de base de datos estándar
que se pueden reutilizar en todos los repositorios de entidades
"""

from typing import TypeVar, Generic, List, Optional, Type
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import desc, asc
import logging

from core.exceptions import (
    AppException,
    NotFoundException,
    DatabaseException,
    StaleWriteException,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Repositorio genérico proporciona operaciones CRUD estándar

    Esta clase debe ser heredada por repositorios de entidades específicos.
    """

    resource_name = "Registro"

    def __init__(self, db: Session, model_class: Type[T]):
        """
        Inicializa el repositorio.

        Args:
            db: Sesión SQLAlchemy
            model_class: Clase del modelo ORM para este repositorio
        """
        self.db = db
        self.model_class = model_class

    def get_by_id(self, id: int) -> Optional[T]:
        """
        Obtiene una entidad por su ID.

        Args:
            id: ID de la entidad

        Returns:
            La entidad o None si no existe
        """
        try:
            return self.db.get(self.model_class, id)
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.model_class.__name__} by id {id}: {e}")
            raise DatabaseException(f"Error al obtener {self.resource_name}")

    def get_by_id_or_fail(self, id: int) -> T:
        """
        Obtiene una entidad por su ID o lanza una excepción si no se encuentra.

        Raises:
            NotFoundException: si la entidad no existe
        """
        entity = self.get_by_id(id)
        if entity is None:
            raise NotFoundException(resource=self.resource_name, identifier=str(id))
        return entity

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: Optional[str] = None,
        order_desc: bool = False
    ) -> List[T]:
        """
        Obtiene todas las entidades con paginación.

        Args:
            skip: Número de registros a saltar
            limit: Número máximo de registros a devolver
            order_by: Field name to order by
            order_desc: Whether to order descending
        """
        try:
            query = self.db.query(self.model_class)

            if order_by and hasattr(self.model_class, order_by):
                order_field = getattr(self.model_class, order_by)
                query = query.order_by(desc(order_field) if order_desc else asc(order_field))
            else:
                query = query.order_by(asc(self.model_class.id))

            return query.offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting all {self.model_class.__name__}: {e}")
            raise DatabaseException(f"Error al listar {self.resource_name}")

    def count(self, **filters) -> int:
        """
        Cuenta las entidades que coinciden con los filtros.

        Args:
            **filters: filtros de igualdad como keyword arguments
        """
        try:
            query = self.db.query(self.model_class)
            for field, value in filters.items():
                if hasattr(self.model_class, field) and value is not None:
                    query = query.filter(getattr(self.model_class, field) == value)
            return query.count()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model_class.__name__}: {e}")
            raise DatabaseException(f"Error al contar {self.resource_name}")

    def create(self, entity: T) -> T:
        """
        Crea una nueva entidad.

        Returns:
            La entidad creada (con ID asignado)
        """
        self._flush(entity, "crear")
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """
        Actualiza una entidad existente.

        Returns:
            La entidad actualizada
        """
        self._flush(entity, "actualizar")
        self.db.refresh(entity)
        return entity

    def delete(self, entity: T) -> None:
        """Elimina físicamente una entidad."""
        try:
            self.db.delete(entity)
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al eliminar {self.resource_name}")

    def commit(self) -> None:
        """Realiza el commit de la transacción actual."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            translated = self.translate_error(e)
            if translated is not None:
                raise translated from e
            logger.error(f"Error committing transaction: {e}")
            raise DatabaseException("Error al guardar cambios en la base de datos")

    def translate_error(self, error: SQLAlchemyError, entity: Optional[T] = None) -> Optional[AppException]:
        """
        Traduce errores de persistencia a excepciones de dominio.

        Los repositorios concretos lo extienden para restricciones propias
        (por ejemplo, índices únicos). Devuelve None si no hay traducción.
        """
        if isinstance(error, StaleDataError):
            return StaleWriteException(resource=self.resource_name)
        return None

    def _flush(self, entity: T, action: str) -> None:
        try:
            self.db.add(entity)
            self.db.flush()
        except (IntegrityError, StaleDataError) as e:
            self.db.rollback()
            translated = self.translate_error(e, entity)
            if translated is not None:
                logger.info(f"{self.model_class.__name__} rechazado al {action}: {translated.message}")
                raise translated from e
            logger.error(f"Error al {action} {self.model_class.__name__}: {e}")
            raise DatabaseException(f"Error al {action} {self.resource_name}")
        except SQLAlchemyError as e:
            logger.error(f"Error al {action} {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al {action} {self.resource_name}")
