"""
Vet routes (Controllers) - Layered Architecture.

Vet management plus the per-vet scheduling views: weekly appointments,
available slots, weekly statistics and the schedule page.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from datetime import date
import logging

from models.vets import Vet, VetCreate
from models.appointments import Appointment, AppointmentStats, TimeSlotInfo, VetSchedule
from core.pagination import PaginatedResponse, create_paginated_response
from core.exceptions import AppException
from services.vet_service import VetService
from services.appointment_service import AppointmentService
from dependencies import get_vet_service, get_appointment_service
from routes.errors import handle_service_exception
from auth import get_current_user_dep, require_roles
from config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vets", tags=["vets"])


@router.post("/", response_model=Vet, status_code=status.HTTP_201_CREATED)
async def create_vet(
    vet: VetCreate,
    current_user=Depends(require_roles("admin")),
    service: VetService = Depends(get_vet_service),
):
    try:
        return service.create_vet(vet)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/", response_model=PaginatedResponse[Vet])
async def list_vets(
    page: int = Query(0, ge=0, description="Número de página (0-indexed)"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Tamaño de página"
    ),
    service: VetService = Depends(get_vet_service),
):
    try:
        vets, total = service.list_vets(page=page, page_size=page_size)
        return create_paginated_response(
            items=[v.model_dump() for v in vets],
            page=page,
            page_size=page_size,
            total_items=total
        )
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{vet_id}", response_model=Vet)
async def get_vet(vet_id: int, service: VetService = Depends(get_vet_service)):
    try:
        return service.get_vet(vet_id)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{vet_id}/appointments/week", response_model=List[Appointment])
async def list_week_appointments(
    vet_id: int,
    day: Optional[date] = Query(None, alias="date", description="Cualquier día de la semana (hoy por defecto)"),
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments of the Monday-Sunday week containing `date`."""
    try:
        return service.list_by_vet_and_week(vet_id, day=day)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{vet_id}/available-slots", response_model=List[TimeSlotInfo])
async def available_slots(
    vet_id: int,
    day: date = Query(..., alias="date", description="Día a consultar"),
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Free slots for the vet on `date`, in chronological order."""
    try:
        return [
            TimeSlotInfo(name=slot.name, label=slot.display_name, start=slot.start_time, end=slot.end_time)
            for slot in service.get_available_time_slots(vet_id, day)
        ]
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{vet_id}/appointment-stats", response_model=AppointmentStats)
async def appointment_stats(
    vet_id: int,
    week_start: Optional[date] = Query(None, description="Inicio (lunes de la semana actual por defecto)"),
    week_end: Optional[date] = Query(None, description="Fin (domingo de la semana actual por defecto)"),
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return service.get_appointment_stats(vet_id, week_start, week_end)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{vet_id}/schedule", response_model=VetSchedule)
async def vet_schedule(
    vet_id: int,
    day: Optional[date] = Query(None, alias="date"),
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Weekly schedule with stats and previous/next week anchors."""
    try:
        return service.get_vet_schedule(vet_id, day)
    except AppException as e:
        raise handle_service_exception(e)
