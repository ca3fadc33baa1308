"""
Dependency injection for services and repositories.

This module provides FastAPI dependencies for injecting services
and repositories into route handlers, plus a ServiceContext for code
that runs outside a request (CLI commands).
"""

from typing import Optional
from sqlalchemy.orm import Session
from fastapi import Depends

from config import settings
from database.db import get_db
from repositories.appointment_repository import AppointmentRepository
from repositories.owner_repository import OwnerRepository
from repositories.pet_repository import PetRepository
from repositories.vet_repository import VetRepository
from repositories.visit_repository import VisitRepository
from repositories.user_repository import UserRepository
from services.appointment_service import AppointmentService
from services.conflict_checker import ConflictChecker
from services.owner_service import OwnerService
from services.reminder_service import ReminderService, build_strategies
from services.stats_service import StatsService
from services.user_service import UserService
from services.vet_service import VetService
from services.visit_service import VisitService


# ==================== Service Builders ====================

def build_appointment_service(db: Session) -> AppointmentService:
    appointment_repo = AppointmentRepository(db)
    return AppointmentService(
        appointment_repo,
        VetRepository(db),
        PetRepository(db),
        OwnerRepository(db),
        ConflictChecker(appointment_repo),
    )


def build_reminder_service(db: Session) -> ReminderService:
    """
    Build the reminder dispatcher with the strategies enabled in settings.

    Raises:
        ValidationException: If a configured strategy name is unknown
    """
    strategies = build_strategies(settings.reminder_strategy_list, settings.clinic_email_domain)
    return ReminderService(
        AppointmentRepository(db),
        PetRepository(db),
        OwnerRepository(db),
        VetRepository(db),
        strategies,
        lookahead_hours=settings.reminder_lookahead_hours,
    )


# ==================== Service Dependencies ====================

def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """
    Get AppointmentService instance.

    This is the main dependency to use in route handlers for appointment operations.

    Example:
        ```python
        @router.get("/appointments/{appointment_id}")
        def get_appointment(
            appointment_id: int,
            service: AppointmentService = Depends(get_appointment_service)
        ):
            return service.get_appointment(appointment_id)
        ```
    """
    return build_appointment_service(db)


def get_reminder_service(db: Session = Depends(get_db)) -> ReminderService:
    return build_reminder_service(db)


def get_owner_service(db: Session = Depends(get_db)) -> OwnerService:
    return OwnerService(OwnerRepository(db), PetRepository(db))


def get_vet_service(db: Session = Depends(get_db)) -> VetService:
    return VetService(VetRepository(db))


def get_visit_service(db: Session = Depends(get_db)) -> VisitService:
    return VisitService(VisitRepository(db), PetRepository(db))


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db))


def get_stats_service(db: Session = Depends(get_db)) -> StatsService:
    """
    Get StatsService instance.

    Args:
        db: Database session (injected by FastAPI)
    """
    return StatsService(db)


# ==================== Context Manager for Services ====================

class ServiceContext:
    """
    Context manager for the service layer outside of a request.

    Usage:
        ```python
        with ServiceContext() as ctx:
            report = ctx.reminder_service.dispatch()
        # Session is rolled back on exception and always closed
        ```
    """

    def __init__(self, session_factory=None):
        """Initialize the service context."""
        if session_factory is None:
            from database.db import SessionLocal
            session_factory = SessionLocal
        self.db: Session = session_factory()

        self._reminder_service: Optional[ReminderService] = None
        self._user_service: Optional[UserService] = None

    def __enter__(self):
        """Enter the context."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit the context and cleanup."""
        if exc_type is not None:
            self.db.rollback()
        else:
            self.db.commit()
        self.db.close()

    @property
    def reminder_service(self) -> ReminderService:
        """Get or create ReminderService instance."""
        if self._reminder_service is None:
            self._reminder_service = build_reminder_service(self.db)
        return self._reminder_service

    @property
    def user_service(self) -> UserService:
        """Get or create UserService instance."""
        if self._user_service is None:
            self._user_service = UserService(UserRepository(self.db))
        return self._user_service
