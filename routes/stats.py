"""
Rutas para el dashboard de estadísticas de la clínica.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from auth import get_current_user_dep
from dependencies import get_stats_service
from services.stats_service import StatsService
from models.stats import DashboardStats
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user=Depends(get_current_user_dep),
    service: StatsService = Depends(get_stats_service),
):
    """
    Obtener estadísticas globales del dashboard.

    Incluye totales de propietarios, mascotas y veterinarios, visitas de hoy
    y del mes, la tendencia diaria de visitas, la distribución por tipo de
    mascota y las visitas más recientes.
    """
    try:
        return service.get_dashboard_stats()
    except Exception as e:
        logger.error(f"Error getting dashboard statistics for {current_user.username}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al obtener estadísticas del dashboard"
        )
