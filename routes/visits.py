"""
Visit routes (Controllers) - Layered Architecture.
"""

from fastapi import APIRouter, Depends, status
from typing import List
import logging

from models.visits import Visit, VisitCreate, VisitUpdate
from models.common import create_delete_response
from core.exceptions import AppException
from services.visit_service import VisitService
from dependencies import get_visit_service
from routes.errors import handle_service_exception
from auth import get_current_user_dep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pets/{pet_id}/visits", tags=["visits"])


@router.get("/", response_model=List[Visit])
async def list_visits(pet_id: int, service: VisitService = Depends(get_visit_service)):
    """Visit history of a pet, most recent first."""
    try:
        return service.list_visits(pet_id)
    except AppException as e:
        raise handle_service_exception(e)


@router.post("/", response_model=Visit, status_code=status.HTTP_201_CREATED)
async def create_visit(
    pet_id: int,
    visit: VisitCreate,
    current_user=Depends(get_current_user_dep),
    service: VisitService = Depends(get_visit_service),
):
    try:
        return service.create_visit(pet_id, visit)
    except AppException as e:
        raise handle_service_exception(e)


@router.put("/{visit_id}", response_model=Visit)
async def update_visit(
    pet_id: int,
    visit_id: int,
    visit: VisitUpdate,
    current_user=Depends(get_current_user_dep),
    service: VisitService = Depends(get_visit_service),
):
    try:
        return service.update_visit(pet_id, visit_id, visit)
    except AppException as e:
        raise handle_service_exception(e)


@router.delete("/{visit_id}")
async def delete_visit(
    pet_id: int,
    visit_id: int,
    current_user=Depends(get_current_user_dep),
    service: VisitService = Depends(get_visit_service),
):
    try:
        service.delete_visit(pet_id, visit_id)
        return create_delete_response("Visita eliminada", visit_id)
    except AppException as e:
        raise handle_service_exception(e)
