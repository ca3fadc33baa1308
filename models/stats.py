"""
Modelos para estadísticas del dashboard de la clínica.
"""
from pydantic import BaseModel, Field
from typing import List
import datetime as dt

from models.visits import RecentVisit


class VisitTrendPoint(BaseModel):
    date: dt.date
    count: int = Field(..., ge=0)


class PetTypeCount(BaseModel):
    name: str
    value: int = Field(..., ge=0)


class CityCount(BaseModel):
    name: str
    value: int = Field(..., ge=0)


class DashboardStats(BaseModel):
    """Estadísticas globales de la clínica."""
    total_owners: int = Field(..., description="Total de propietarios registrados")
    total_pets: int = Field(..., description="Total de mascotas")
    total_vets: int = Field(..., description="Total de veterinarios")
    today_visits: int = Field(..., description="Visitas registradas hoy")
    this_month_visits: int = Field(..., description="Visitas del mes calendario actual")
    visit_trend: List[VisitTrendPoint] = Field(..., description="Visitas por día, la más antigua primero")
    pet_type_distribution: List[PetTypeCount] = Field(..., description="Mascotas por tipo")
    owners_by_city: List[CityCount] = Field(..., description="Propietarios por ciudad")
    recent_visits: List[RecentVisit] = Field(..., description="Visitas más recientes")
