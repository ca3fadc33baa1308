"""
Repositorio para la entidad Cita.
Gestiona todas las operaciones de base de datos relacionadas con las citas.

Las franjas se guardan por nombre, así que el orden cronológico dentro de un
día se aplica en Python con `TimeSlot.sort_key`.
"""

from typing import Iterable, List, Optional
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import func

from repositories.base_repository import BaseRepository
from database.models import AppointmentORM, PetORM
from models.appointments import AppointmentStatus, TimeSlot
from core.exceptions import AppException, DatabaseException, SlotUnavailableException
import logging

logger = logging.getLogger(__name__)

SLOT_INDEX_NAME = "uq_appointments_vet_date_slot"


def _chronological(appointments: Iterable[AppointmentORM]) -> List[AppointmentORM]:
    return sorted(appointments, key=lambda a: (a.appointment_date, a.time_slot.sort_key, a.id))


class AppointmentRepository(BaseRepository[AppointmentORM]):
    """Repositorio para la entidad Cita."""

    resource_name = "Cita"

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de citas.

        Args:
            db: Sesión de SQLAlchemy
        """
        super().__init__(db, AppointmentORM)

    def translate_error(self, error: SQLAlchemyError, entity: Optional[AppointmentORM] = None) -> Optional[AppException]:
        """El índice único parcial se traduce al mismo error que el verificador de conflictos."""
        if isinstance(error, IntegrityError) and _is_slot_violation(error):
            if entity is None:
                return SlotUnavailableException()
            return SlotUnavailableException(
                vet_id=entity.vet_id,
                appointment_date=entity.appointment_date,
                time_slot=entity.time_slot,
            )
        return super().translate_error(error, entity)

    def _active(self):
        return self.db.query(AppointmentORM).filter(
            AppointmentORM.status != AppointmentStatus.canceled
        )

    def find_active_by_slot(
        self,
        vet_id: int,
        appointment_date: date,
        time_slot: TimeSlot,
        exclude_id: Optional[int] = None
    ) -> Optional[AppointmentORM]:
        """
        Busca la cita no cancelada que ocupa (veterinario, fecha, franja).

        Args:
            vet_id: ID del veterinario
            appointment_date: Día de la cita
            time_slot: Franja horaria
            exclude_id: ID de cita a ignorar (la propia cita al actualizar)

        Returns:
            La cita que ocupa la franja o None
        """
        try:
            query = self._active().filter(
                AppointmentORM.vet_id == vet_id,
                AppointmentORM.appointment_date == appointment_date,
                AppointmentORM.time_slot == time_slot,
            )
            if exclude_id is not None:
                query = query.filter(AppointmentORM.id != exclude_id)
            return query.first()
        except SQLAlchemyError as e:
            logger.error(f"Error finding appointment for vet {vet_id} on {appointment_date} {time_slot}: {e}")
            raise DatabaseException("Error al verificar disponibilidad de la franja")

    def find_active_exact(
        self,
        vet_id: int,
        pet_id: int,
        appointment_date: date,
        time_slot: TimeSlot
    ) -> Optional[AppointmentORM]:
        """Cita no cancelada con exactamente el mismo veterinario, mascota, fecha y franja."""
        try:
            return self._active().filter(
                AppointmentORM.vet_id == vet_id,
                AppointmentORM.pet_id == pet_id,
                AppointmentORM.appointment_date == appointment_date,
                AppointmentORM.time_slot == time_slot,
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Error finding exact appointment for vet {vet_id}, pet {pet_id}: {e}")
            raise DatabaseException("Error al buscar la cita")

    def find_by_vet_and_date(self, vet_id: int, appointment_date: date) -> List[AppointmentORM]:
        try:
            rows = self.db.query(AppointmentORM).filter(
                AppointmentORM.vet_id == vet_id,
                AppointmentORM.appointment_date == appointment_date,
            ).all()
            return _chronological(rows)
        except SQLAlchemyError as e:
            logger.error(f"Error finding appointments for vet {vet_id} on {appointment_date}: {e}")
            raise DatabaseException("Error al buscar citas del veterinario")

    def find_by_owner(self, owner_id: int) -> List[AppointmentORM]:
        """
        Busca las citas de todas las mascotas de un propietario.

        Args:
            owner_id: ID del propietario

        Returns:
            lista de citas ordenada por fecha y franja
        """
        try:
            rows = self.db.query(AppointmentORM).join(
                PetORM, AppointmentORM.pet_id == PetORM.id
            ).filter(
                PetORM.owner_id == owner_id
            ).all()
            return _chronological(rows)
        except SQLAlchemyError as e:
            logger.error(f"Error finding appointments by owner {owner_id}: {e}")
            raise DatabaseException("Error al buscar citas por propietario")

    def find_by_date(self, appointment_date: date) -> List[AppointmentORM]:
        try:
            rows = self.db.query(AppointmentORM).filter(
                AppointmentORM.appointment_date == appointment_date
            ).all()
            return _chronological(rows)
        except SQLAlchemyError as e:
            logger.error(f"Error finding appointments on {appointment_date}: {e}")
            raise DatabaseException("Error al buscar citas por fecha")

    def find_by_vet_and_week(self, vet_id: int, start: date, end: date) -> List[AppointmentORM]:
        """
        Citas de un veterinario entre dos fechas (ambas inclusivas).

        Args:
            vet_id: ID del veterinario
            start: Primer día del rango
            end: Último día del rango
        """
        try:
            rows = self.db.query(AppointmentORM).filter(
                AppointmentORM.vet_id == vet_id,
                AppointmentORM.appointment_date >= start,
                AppointmentORM.appointment_date <= end,
            ).all()
            return _chronological(rows)
        except SQLAlchemyError as e:
            logger.error(f"Error finding appointments for vet {vet_id} between {start} and {end}: {e}")
            raise DatabaseException("Error al buscar citas de la semana")

    def find_by_vet(self, vet_id: int, from_date: date) -> List[AppointmentORM]:
        """Próximas citas no canceladas de un veterinario a partir de `from_date`."""
        try:
            rows = self._active().filter(
                AppointmentORM.vet_id == vet_id,
                AppointmentORM.appointment_date >= from_date,
            ).all()
            return _chronological(rows)
        except SQLAlchemyError as e:
            logger.error(f"Error finding upcoming appointments for vet {vet_id}: {e}")
            raise DatabaseException("Error al buscar citas del veterinario")

    def find_by_pet(self, pet_id: int) -> List[AppointmentORM]:
        try:
            rows = self.db.query(AppointmentORM).filter(AppointmentORM.pet_id == pet_id).all()
            return _chronological(rows)
        except SQLAlchemyError as e:
            logger.error(f"Error finding appointments by pet {pet_id}: {e}")
            raise DatabaseException("Error al buscar citas por mascota")

    def find_upcoming(
        self,
        statuses: Iterable[AppointmentStatus],
        first_day: date,
        last_day: date
    ) -> List[AppointmentORM]:
        """
        Citas con alguno de los estados dados entre dos fechas inclusivas.

        El filtrado fino por hora de inicio lo hace el servicio de recordatorios.
        """
        try:
            rows = self.db.query(AppointmentORM).filter(
                AppointmentORM.status.in_(list(statuses)),
                AppointmentORM.appointment_date >= first_day,
                AppointmentORM.appointment_date <= last_day,
            ).all()
            return _chronological(rows)
        except SQLAlchemyError as e:
            logger.error(f"Error finding upcoming appointments: {e}")
            raise DatabaseException("Error al buscar próximas citas")

    def count_by_vet_and_week(
        self,
        vet_id: int,
        start: date,
        end: date,
        status: Optional[AppointmentStatus] = None
    ) -> int:
        """
        Cuenta las citas de un veterinario en un rango, opcionalmente por estado.

        Args:
            vet_id: ID del veterinario
            start: Primer día (inclusivo)
            end: Último día (inclusivo)
            status: Estado a filtrar; None cuenta todas
        """
        try:
            query = self.db.query(func.count(AppointmentORM.id)).filter(
                AppointmentORM.vet_id == vet_id,
                AppointmentORM.appointment_date >= start,
                AppointmentORM.appointment_date <= end,
            )
            if status is not None:
                query = query.filter(AppointmentORM.status == status)
            return query.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Error counting appointments for vet {vet_id}: {e}")
            raise DatabaseException("Error al contar citas")


def _is_slot_violation(error: IntegrityError) -> bool:
    message = str(error.orig) if error.orig is not None else str(error)
    if SLOT_INDEX_NAME in message:
        return True
    # SQLite reporta las columnas del índice en lugar de su nombre
    return "UNIQUE constraint failed: appointments.vet_id" in message
