"""
Servicio base con operaciones de lógica de negocio comunes.
Esta clase proporciona una base para las clases de servicio que implementan
la lógica de negocio y coordinan las operaciones del repositorio.
"""

from typing import TypeVar, Generic, List, Optional
import logging

from core.pagination import calculate_skip

logger = logging.getLogger(__name__)

# Type variables
T = TypeVar('T')  # ORM Model
R = TypeVar('R')  # Repository


class BaseService(Generic[T, R]):
    """
    Servicio base que proporciona operaciones lógicas de negocio comunes.
    Esta clase debe ser heredada por servicios de entidades específicas.
    """

    def __init__(self, repository: R):
        """
        Inicializa el servicio.

        Args:
            repository: The repository instance for data access
        """
        self.repository = repository

    def get_by_id_or_fail(self, id: int) -> T:
        """
        Obtiene una entidad por su ID o lanza una excepción si no se encuentra.

        Raises:
            NotFoundException: If entity is not found
        """
        return self.repository.get_by_id_or_fail(id)

    def get_all(
        self,
        page: int = 0,
        page_size: int = 50,
        order_by: Optional[str] = None,
        order_desc: bool = False
    ) -> tuple[List[T], int]:
        """
        Obtiene todas las entidades con paginación.

        Args:
            page: Número de página (0-indexed)
            page_size: Items por página
            order_by: Field name to order by
            order_desc: Si se debe ordenar en orden descendente

        Returns:
            Tuple of (list of entities, total count)
        """
        skip = calculate_skip(page, page_size)

        items = self.repository.get_all(
            skip=skip,
            limit=page_size,
            order_by=order_by,
            order_desc=order_desc
        )

        total_count = self.repository.count()

        return items, total_count

    def delete(self, id: int) -> None:
        """
        Elimina físicamente una entidad.

        Raises:
            NotFoundException: If entity is not found
        """
        entity = self.get_by_id_or_fail(id)
        self.repository.delete(entity)
        self.repository.commit()
        logger.info(f"{self.repository.resource_name} {id} deleted")
