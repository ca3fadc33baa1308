from pydantic import BaseModel, Field
from typing import Optional
from datetime import date
from enum import Enum


class VaccinationStatus(str, Enum):
    fully_vaccinated = "fully_vaccinated"
    not_vaccinated = "not_vaccinated"
    partially_vaccinated = "partially_vaccinated"
    vaccination_expired = "vaccination_expired"


class VisitBase(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    vaccination_status: Optional[VaccinationStatus] = None
    vaccination_date: Optional[date] = None


class VisitCreate(VisitBase):
    """Registrar una visita. Si no se indica fecha se usa la de hoy."""
    visit_date: Optional[date] = None


class VisitUpdate(BaseModel):
    visit_date: Optional[date] = None
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    vaccination_status: Optional[VaccinationStatus] = None
    vaccination_date: Optional[date] = None


class Visit(VisitBase):
    id: int
    pet_id: int
    visit_date: date


class RecentVisit(BaseModel):
    """Fila de 'visitas recientes' del dashboard."""
    id: int
    visit_date: date
    description: str
    pet_id: int
    pet_name: str
    owner_id: int
    owner_name: str
