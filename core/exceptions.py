"""
Excepciones personalizadas para la aplicación.

Estas excepciones proporcionan una forma estructurada de manejar errores de lógica de negocio
y mapearlos a códigos de estado HTTP apropiados en la capa de API.
"""

from typing import Optional, Any


class AppException(Exception):
    """Excepción base para todos los errores de la aplicación."""

    error_code = "app_error"

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class BusinessException(AppException):
    """Excepción para errores de lógica de negocio."""

    error_code = "business_rule"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=400, details=details)


class NotFoundException(AppException):
    """Excepción cuando un recurso no se encuentra."""

    error_code = "not_found"

    def __init__(
        self,
        resource: str,
        identifier: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        message = f"{resource} no encontrado"
        if identifier:
            message += f": {identifier}"
        super().__init__(message=message, status_code=404, details=details)


class ValidationException(AppException):
    """Excepción para errores de validación."""

    error_code = "validation"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        if field:
            details = details or {}
            details["field"] = field
        super().__init__(message=message, status_code=422, details=details)


class ConflictException(AppException):
    """Excepción base para conflictos con el estado actual del recurso."""

    error_code = "conflict"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        details = details or {}
        details.setdefault("error", self.error_code)
        super().__init__(message=message, status_code=409, details=details)


class SlotUnavailableException(ConflictException):
    """El veterinario ya tiene una cita activa en esa fecha y franja horaria."""

    error_code = "slot_unavailable"

    def __init__(
        self,
        vet_id: Optional[int] = None,
        appointment_date: Optional[Any] = None,
        time_slot: Optional[Any] = None,
    ):
        details: dict[str, Any] = {}
        if vet_id is not None:
            details["vet_id"] = vet_id
        if appointment_date is not None:
            details["appointment_date"] = str(appointment_date)
        if time_slot is not None:
            details["time_slot"] = getattr(time_slot, "value", str(time_slot))
        super().__init__(
            message="El horario ya está reservado, elija otra franja",
            details=details,
        )


class StaleWriteException(ConflictException):
    """La actualización se basó en una versión obsoleta del registro."""

    error_code = "stale_write"

    def __init__(
        self,
        resource: str,
        identifier: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        message = f"{resource} fue modificado por otra operación"
        if identifier:
            message += f": {identifier}"
        super().__init__(message=message + "; recargue e intente de nuevo", details=details)


class DatabaseException(AppException):
    """Excepción para errores de base de datos."""

    error_code = "database"

    def __init__(
        self,
        message: str = "Error de base de datos",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=500, details=details)
