"""
Owner and pet routes (Controllers) - Layered Architecture.

Business logic lives in OwnerService; the owner's appointments come from
AppointmentService.
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import List
import logging

from models.owners import Owner, OwnerCreate, OwnerUpdate, Pet, PetCreate, PetUpdate, PetType
from models.appointments import Appointment
from core.pagination import PaginatedResponse, create_paginated_response
from core.exceptions import AppException
from services.owner_service import OwnerService
from services.appointment_service import AppointmentService
from dependencies import get_owner_service, get_appointment_service
from routes.errors import handle_service_exception
from auth import get_current_user_dep
from config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/owners", tags=["owners"])


# ==================== Owners ====================

@router.post("/", response_model=Owner, status_code=status.HTTP_201_CREATED)
async def create_owner(owner: OwnerCreate, service: OwnerService = Depends(get_owner_service)):
    try:
        return service.create_owner(owner)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/", response_model=PaginatedResponse[Owner])
async def search_owners(
    last_name: str = Query("", description="Prefijo del apellido (vacío lista todos)"),
    page: int = Query(0, ge=0, description="Número de página (0-indexed)"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Tamaño de página"
    ),
    service: OwnerService = Depends(get_owner_service),
):
    """
    Search owners by last name with pagination.
    """
    try:
        owners, total = service.search_by_last_name(last_name, page=page, page_size=page_size)
        return create_paginated_response(
            items=[o.model_dump() for o in owners],
            page=page,
            page_size=page_size,
            total_items=total
        )
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/pet-types", response_model=List[PetType])
async def list_pet_types(service: OwnerService = Depends(get_owner_service)):
    try:
        return service.list_pet_types()
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{owner_id}", response_model=Owner)
async def get_owner(owner_id: int, service: OwnerService = Depends(get_owner_service)):
    try:
        return service.get_owner(owner_id)
    except AppException as e:
        raise handle_service_exception(e)


@router.put("/{owner_id}", response_model=Owner)
async def update_owner(
    owner_id: int,
    owner: OwnerUpdate,
    service: OwnerService = Depends(get_owner_service),
):
    try:
        return service.update_owner(owner_id, owner)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{owner_id}/appointments", response_model=List[Appointment])
async def list_owner_appointments(
    owner_id: int,
    current_user=Depends(get_current_user_dep),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments of every pet of the owner, by date and slot."""
    try:
        return service.list_by_owner(owner_id)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        logger.error(f"Error listing appointments of owner {owner_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al listar citas del propietario"
        )


# ==================== Pets ====================

@router.get("/{owner_id}/pets", response_model=List[Pet])
async def list_pets(owner_id: int, service: OwnerService = Depends(get_owner_service)):
    try:
        return service.list_pets(owner_id)
    except AppException as e:
        raise handle_service_exception(e)


@router.post("/{owner_id}/pets", response_model=Pet, status_code=status.HTTP_201_CREATED)
async def add_pet(
    owner_id: int,
    pet: PetCreate,
    service: OwnerService = Depends(get_owner_service),
):
    try:
        return service.add_pet(owner_id, pet)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{owner_id}/pets/{pet_id}", response_model=Pet)
async def get_pet(owner_id: int, pet_id: int, service: OwnerService = Depends(get_owner_service)):
    try:
        return service.get_pet(owner_id, pet_id)
    except AppException as e:
        raise handle_service_exception(e)


@router.put("/{owner_id}/pets/{pet_id}", response_model=Pet)
async def update_pet(
    owner_id: int,
    pet_id: int,
    pet: PetUpdate,
    service: OwnerService = Depends(get_owner_service),
):
    try:
        return service.update_pet(owner_id, pet_id, pet)
    except AppException as e:
        raise handle_service_exception(e)
