""" Utilidades principales y componentes compartidos para la aplicación.

Este paquete contiene:

- Excepciones personalizadas
- Funciones auxiliares de paginación
"""

from .exceptions import (
    AppException,
    BusinessException,
    NotFoundException,
    ValidationException,
    ConflictException,
    SlotUnavailableException,
    StaleWriteException,
    DatabaseException,
)
from .pagination import (
    PaginationMeta,
    PaginatedResponse,
    calculate_pagination_meta,
    create_paginated_response,
    calculate_skip,
)

__all__ = [
    # Excepciones
    "AppException",
    "BusinessException",
    "NotFoundException",
    "ValidationException",
    "ConflictException",
    "SlotUnavailableException",
    "StaleWriteException",
    "DatabaseException",
    # paginacion
    "PaginationMeta",
    "PaginatedResponse",
    "calculate_pagination_meta",
    "create_paginated_response",
    "calculate_skip",
]
