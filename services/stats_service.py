"""
Servicio para calcular estadísticas del dashboard.

Todas las cifras salen de consultas de agregación sobre el estado actual;
no hay caché.
"""
from datetime import date, datetime, timedelta
from typing import Callable, List
from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session
from sqlalchemy import func

from database.models import OwnerORM, PetORM, PetTypeORM, VetORM, VisitORM
from models.stats import CityCount, DashboardStats, VisitTrendPoint, PetTypeCount
from models.visits import RecentVisit
from utils.datetime_utils import get_local_now
from config import settings
import logging

logger = logging.getLogger(__name__)


class StatsService:
    """Servicio para calcular estadísticas del dashboard."""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = get_local_now,
        trend_days: int = settings.stats_trend_days,
        recent_limit: int = settings.stats_recent_visits
    ):
        """
        Initialize stats service.

        Args:
            db: SQLAlchemy session
            clock: devuelve el instante actual en la zona de la clínica
            trend_days: días incluidos en la tendencia de visitas
            recent_limit: número de visitas recientes a devolver
        """
        self.db = db
        self.clock = clock
        self.trend_days = trend_days
        self.recent_limit = recent_limit

    def _today(self) -> date:
        return self.clock().date()

    def total_owners(self) -> int:
        return self.db.query(func.count(OwnerORM.id)).scalar() or 0

    def total_pets(self) -> int:
        return self.db.query(func.count(PetORM.id)).scalar() or 0

    def total_vets(self) -> int:
        return self.db.query(func.count(VetORM.id)).scalar() or 0

    def today_visits(self) -> int:
        return self._count_visits_between(self._today(), self._today())

    def this_month_visits(self) -> int:
        """Visitas del mes calendario en curso."""
        first_day = self._today().replace(day=1)
        last_day = first_day + relativedelta(months=1) - timedelta(days=1)
        return self._count_visits_between(first_day, last_day)

    def visit_trend(self) -> List[VisitTrendPoint]:
        """
        Visitas por día de los últimos `trend_days` días, hoy incluido.

        Siempre devuelve exactamente `trend_days` puntos, el más antiguo
        primero; los días sin visitas aparecen con cero.
        """
        today = self._today()
        first_day = today - timedelta(days=self.trend_days - 1)

        rows = self.db.query(
            VisitORM.visit_date, func.count(VisitORM.id)
        ).filter(
            VisitORM.visit_date >= first_day,
            VisitORM.visit_date <= today
        ).group_by(VisitORM.visit_date).all()
        counts = {visit_date: count for visit_date, count in rows}

        return [
            VisitTrendPoint(date=day, count=counts.get(day, 0))
            for day in (first_day + timedelta(days=i) for i in range(self.trend_days))
        ]

    def pet_type_distribution(self) -> List[PetTypeCount]:
        """Número de mascotas por tipo, de mayor a menor."""
        rows = self.db.query(
            PetTypeORM.name, func.count(PetORM.id).label("total")
        ).join(
            PetORM, PetORM.type_id == PetTypeORM.id
        ).group_by(PetTypeORM.name).order_by(
            func.count(PetORM.id).desc(), PetTypeORM.name.asc()
        ).all()
        return [PetTypeCount(name=name, value=total) for name, total in rows]

    def owners_by_city(self) -> List[CityCount]:
        """Número de propietarios por ciudad, de mayor a menor."""
        total = func.count(OwnerORM.id)
        rows = self.db.query(OwnerORM.city, total).group_by(OwnerORM.city).order_by(
            total.desc(), OwnerORM.city.asc()
        ).all()
        return [CityCount(name=city, value=count) for city, count in rows]

    def recent_visits(self) -> List[RecentVisit]:
        rows = self.db.query(VisitORM, PetORM, OwnerORM).join(
            PetORM, VisitORM.pet_id == PetORM.id
        ).join(
            OwnerORM, PetORM.owner_id == OwnerORM.id
        ).order_by(
            VisitORM.visit_date.desc(), VisitORM.id.desc()
        ).limit(self.recent_limit).all()

        return [
            RecentVisit(
                id=visit.id,
                visit_date=visit.visit_date,
                description=visit.description,
                pet_id=pet.id,
                pet_name=pet.name,
                owner_id=owner.id,
                owner_name=f"{owner.first_name} {owner.last_name}",
            )
            for visit, pet, owner in rows
        ]

    def get_dashboard_stats(self) -> DashboardStats:
        """
        Obtener todas las estadísticas del dashboard.

        Returns:
            DashboardStats con totales, tendencia, distribución y visitas recientes
        """
        stats = DashboardStats(
            total_owners=self.total_owners(),
            total_pets=self.total_pets(),
            total_vets=self.total_vets(),
            today_visits=self.today_visits(),
            this_month_visits=self.this_month_visits(),
            visit_trend=self.visit_trend(),
            pet_type_distribution=self.pet_type_distribution(),
            owners_by_city=self.owners_by_city(),
            recent_visits=self.recent_visits(),
        )
        logger.debug(f"Dashboard stats computed: {stats.total_owners} owners, {stats.total_pets} pets")
        return stats

    def _count_visits_between(self, first_day: date, last_day: date) -> int:
        return self.db.query(func.count(VisitORM.id)).filter(
            VisitORM.visit_date >= first_day,
            VisitORM.visit_date <= last_day
        ).scalar() or 0
