"""
Conversión de excepciones de servicio a respuestas HTTP.
"""

from fastapi import HTTPException, status
import logging

from core.exceptions import AppException

logger = logging.getLogger(__name__)


def handle_service_exception(e: Exception) -> HTTPException:
    """Convert service layer exceptions to HTTP exceptions.

    The detail carries `error` (stable code), `message` and `details`, so
    clients can tell a slot conflict from a stale write.
    """
    if isinstance(e, AppException):
        if e.status_code >= 500:
            logger.error(f"Service error: {e.message}")
        return HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message, "details": e.details}
        )
    logger.error(f"Unexpected error: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Error interno del servidor"
    )
