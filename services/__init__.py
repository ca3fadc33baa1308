"""
Capa de servicios con la lógica de negocio.

Los servicios reciben sus repositorios por constructor y no conocen HTTP.
"""

from .base_service import BaseService
from .conflict_checker import ConflictChecker
from .appointment_service import AppointmentService
from .reminder_service import ReminderService, build_strategies, log_reminder, make_email_reminder
from .stats_service import StatsService
from .owner_service import OwnerService
from .vet_service import VetService
from .visit_service import VisitService
from .user_service import UserService

__all__ = [
    "BaseService",
    "ConflictChecker",
    "AppointmentService",
    "ReminderService",
    "build_strategies",
    "log_reminder",
    "make_email_reminder",
    "StatsService",
    "OwnerService",
    "VetService",
    "VisitService",
    "UserService",
]
