"""
Utilidades para manejo de fechas y zonas horarias.

Este módulo proporciona funciones para trabajar con fechas
en la zona horaria configurada de la clínica.
"""
from datetime import date, datetime, timedelta
from typing import Tuple
from zoneinfo import ZoneInfo
from config import settings


def get_local_now() -> datetime:
    """
    Obtiene la fecha y hora actual en la zona horaria local configurada.

    Returns:
        datetime: Fecha y hora actual con zona horaria.
    """
    tz = ZoneInfo(settings.timezone)
    return datetime.now(tz)


def get_local_today() -> date:
    """Fecha actual (día calendario) en la zona horaria de la clínica."""
    return get_local_now().date()


def week_bounds(day: date) -> Tuple[date, date]:
    """
    Devuelve el lunes y el domingo de la semana que contiene `day`.

    Args:
        day: Cualquier día de la semana

    Returns:
        Tupla (inicio, fin), ambos inclusivos
    """
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)
