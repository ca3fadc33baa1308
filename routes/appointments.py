"""
Appointment routes (Controllers) - Layered Architecture.

This module handles HTTP requests/responses for appointment endpoints.
All business logic is delegated to the AppointmentService and
ReminderService layers.
"""

from fastapi import APIRouter, HTTPException, Depends, Query, Response, status
from typing import List, Optional
from datetime import date
import logging

from models.appointments import (
    Appointment,
    AppointmentCreate,
    AppointmentIdempotentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    BatchRequest,
    BatchResult,
    IdempotentAppointmentResult,
    ReminderReport,
    TimeSlot,
    TimeSlotInfo,
)
from models.common import create_delete_response
from core.exceptions import AppException
from services.appointment_service import AppointmentService
from services.reminder_service import ReminderService
from dependencies import get_appointment_service, get_reminder_service
from routes.errors import handle_service_exception
from auth import get_current_user_dep, require_roles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])


def _unexpected(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Error al {action}"
    )


# ==================== Catalogs ====================

@router.get("/time-slots", response_model=List[TimeSlotInfo])
async def list_time_slots():
    """Bookable slots in chronological order."""
    return [
        TimeSlotInfo(name=slot.name, label=slot.display_name, start=slot.start_time, end=slot.end_time)
        for slot in TimeSlot.ordered()
    ]


@router.get("/statuses", response_model=List[str])
async def list_statuses():
    return [s.value for s in AppointmentStatus]


# ==================== Reminders ====================

@router.get("/reminders/upcoming", response_model=List[Appointment])
async def upcoming_for_reminders(
    current_user=Depends(get_current_user_dep),
    reminder_service: ReminderService = Depends(get_reminder_service),
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    Appointments that the next reminder run would notify.
    """
    try:
        upcoming = reminder_service.find_upcoming()
        return service.to_response_list(upcoming)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("listar recordatorios", e)


@router.post("/reminders", response_model=ReminderReport)
async def send_reminders(
    strategies: Optional[List[str]] = Query(None, description="Estrategias a usar (todas por defecto)"),
    current_user=Depends(require_roles("admin", "receptionist")),
    reminder_service: ReminderService = Depends(get_reminder_service),
):
    """
    Dispatch reminders for upcoming appointments.

    Failures of a single strategy are logged and counted in the report;
    they never fail the request.
    """
    try:
        return reminder_service.dispatch(strategy_names=strategies)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("enviar recordatorios", e)


# ==================== Batch ====================

@router.post("/batch/confirm", response_model=BatchResult)
async def batch_confirm(
    request: BatchRequest,
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Confirm every pending appointment in `ids`; others are skipped."""
    try:
        return BatchResult(count=service.batch_confirm(request.ids))
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("confirmar citas", e)


@router.post("/batch/cancel", response_model=BatchResult)
async def batch_cancel(
    request: BatchRequest,
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Cancel every pending or confirmed appointment in `ids`; others are skipped."""
    try:
        return BatchResult(count=service.batch_cancel(request.ids))
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("cancelar citas", e)


# ==================== CRUD ====================

@router.post("/", response_model=Appointment, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment: AppointmentCreate,
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    Book a new appointment.

    Returns 409 with `error = slot_unavailable` when the vet already has an
    active appointment in that slot.
    """
    try:
        return service.create_appointment(appointment)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("crear cita", e)


@router.post("/idempotent", response_model=IdempotentAppointmentResult)
async def create_appointment_idempotent(
    request: AppointmentIdempotentCreate,
    response: Response,
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    Book an appointment unless an identical active one exists.

    201 when a new appointment was created, 200 when the existing one is returned.
    """
    try:
        appointment, created = service.create_appointment_idempotent(
            request.vet_id,
            request.pet_id,
            request.appointment_date,
            request.time_slot,
            request.notes,
        )
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("crear cita", e)

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return IdempotentAppointmentResult(created=created, appointment=appointment)


@router.get("/", response_model=List[Appointment])
async def list_appointments(
    vet_id: Optional[int] = Query(None, description="Filtrar por veterinario"),
    day: Optional[date] = Query(None, alias="date", description="Filtrar por fecha"),
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    List appointments.

    - `vet_id` and `date`: that vet's appointments on that day
    - `date` only: every appointment on that day
    - `vet_id` only: the vet's upcoming active appointments
    - neither: today's appointments
    """
    try:
        if vet_id is not None and day is not None:
            return service.list_by_vet_and_date(vet_id, day)
        if vet_id is not None:
            return service.list_upcoming_for_vet(vet_id)
        return service.list_by_date(day or service.today())
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("listar citas", e)


@router.get("/{appointment_id}", response_model=Appointment)
async def get_appointment(
    appointment_id: int,
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return service.get_appointment(appointment_id)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("obtener cita", e)


@router.put("/{appointment_id}", response_model=Appointment)
async def update_appointment(
    appointment_id: int,
    appointment: AppointmentUpdate,
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    Update an appointment.

    The body must carry the `version` the client read. A mismatch returns
    409 with `error = stale_write`; an occupied target slot returns 409 with
    `error = slot_unavailable`.
    """
    try:
        return service.update_appointment(appointment_id, appointment)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("actualizar cita", e)


@router.post("/{appointment_id}/cancel", response_model=Appointment)
async def cancel_appointment(
    appointment_id: int,
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Cancel an appointment. The row is kept and the slot becomes free."""
    try:
        return service.cancel_appointment(appointment_id)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("cancelar cita", e)


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    current_user=Depends(require_roles("admin")),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Physically delete an appointment (admin only)."""
    try:
        service.delete_appointment(appointment_id)
        return create_delete_response("Cita eliminada", appointment_id)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        raise _unexpected("eliminar cita", e)
