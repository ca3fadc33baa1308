"""
Servicio para la lógica de negocio de Citas.
Gestiona reserva, modificación, cancelación y consultas de citas.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple
from datetime import date, datetime, timedelta
import logging

from services.base_service import BaseService
from services.conflict_checker import ConflictChecker
from repositories.appointment_repository import AppointmentRepository
from repositories.owner_repository import OwnerRepository
from repositories.pet_repository import PetRepository
from repositories.vet_repository import VetRepository
from database.models import AppointmentORM
from models.appointments import (
    ACTIVE_STATUSES,
    INITIAL_STATUSES,
    Appointment,
    AppointmentCreate,
    AppointmentStats,
    AppointmentStatus,
    AppointmentUpdate,
    TimeSlot,
    VetSchedule,
    can_transition,
)
from core.exceptions import (
    BusinessException,
    ConflictException,
    SlotUnavailableException,
    StaleWriteException,
    ValidationException,
)
from utils.datetime_utils import get_local_now, week_bounds

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("vet_id", "pet_id", "appointment_date", "time_slot", "status")


class AppointmentService(BaseService[AppointmentORM, AppointmentRepository]):
    """Servicio para la lógica de negocio de Citas."""

    def __init__(
        self,
        appointment_repository: AppointmentRepository,
        vet_repository: VetRepository,
        pet_repository: PetRepository,
        owner_repository: OwnerRepository,
        conflict_checker: Optional[ConflictChecker] = None,
        clock: Callable[[], datetime] = get_local_now
    ):
        """
        Inicializa el servicio de citas.

        Args:
            appointment_repository: AppointmentRepository instance
            vet_repository: VetRepository instance
            pet_repository: PetRepository instance
            owner_repository: OwnerRepository instance
            conflict_checker: verificador de franjas (por defecto uno sobre el mismo repositorio)
            clock: devuelve el instante actual en la zona de la clínica
        """
        super().__init__(appointment_repository)
        self.vet_repo = vet_repository
        self.pet_repo = pet_repository
        self.owner_repo = owner_repository
        self.conflict_checker = conflict_checker or ConflictChecker(appointment_repository)
        self.clock = clock

    def today(self) -> date:
        return self.clock().date()

    # ==================== Validación ====================

    def _validate_required(self, data: AppointmentCreate) -> None:
        for field in REQUIRED_FIELDS:
            if getattr(data, field) is None:
                raise ValidationException(
                    message=f"El campo '{field}' es obligatorio",
                    field=field
                )

    def _validate_not_past(self, appointment_date: date) -> None:
        if appointment_date < self.today():
            raise ValidationException(
                message="No se puede agendar una cita con fecha anterior a la actual",
                field="appointment_date"
            )

    def _validate_references(self, vet_id: int, pet_id: int) -> None:
        if self.vet_repo.get_by_id(vet_id) is None:
            raise ValidationException(
                message=f"Veterinario {vet_id} no encontrado",
                field="vet_id"
            )
        if self.pet_repo.get_by_id(pet_id) is None:
            raise ValidationException(
                message=f"Mascota {pet_id} no encontrada",
                field="pet_id"
            )

    # ==================== Escrituras ====================

    def create_appointment(self, data: AppointmentCreate) -> Appointment:
        """
        Crea una nueva cita.

        Args:
            data: datos de la cita

        Returns:
            Cita creada

        Raises:
            ValidationException: campo ausente, fecha pasada, veterinario o mascota inexistente
            SlotUnavailableException: la franja ya está reservada
        """
        self._validate_required(data)
        self._validate_not_past(data.appointment_date)
        self._validate_references(data.vet_id, data.pet_id)

        if data.status not in INITIAL_STATUSES:
            raise ValidationException(
                message="Una cita nueva debe estar pendiente de confirmación o confirmada",
                field="status"
            )

        self.conflict_checker.ensure_slot_available(data.vet_id, data.appointment_date, data.time_slot)

        appointment = AppointmentORM(
            vet_id=data.vet_id,
            pet_id=data.pet_id,
            appointment_date=data.appointment_date,
            time_slot=data.time_slot,
            status=data.status,
            notes=data.notes,
        )

        created = self.repository.create(appointment)
        self.repository.commit()

        logger.info(
            f"Appointment {created.id} created for pet {created.pet_id} with vet {created.vet_id} "
            f"on {created.appointment_date} {created.time_slot.value}"
        )

        return self._to_response_model(created)

    def create_appointment_idempotent(
        self,
        vet_id: int,
        pet_id: int,
        appointment_date: date,
        time_slot: TimeSlot,
        notes: Optional[str] = None
    ) -> Tuple[Appointment, bool]:
        """
        Devuelve la cita no cancelada idéntica si existe, o crea una pendiente.

        Returns:
            Tupla (cita, creada)
        """
        existing = self.repository.find_active_exact(vet_id, pet_id, appointment_date, time_slot)
        if existing is not None:
            logger.info(f"Idempotent create matched existing appointment {existing.id}")
            return self._to_response_model(existing), False

        data = AppointmentCreate(
            vet_id=vet_id,
            pet_id=pet_id,
            appointment_date=appointment_date,
            time_slot=time_slot,
            status=AppointmentStatus.pending_confirmation,
            notes=notes,
        )
        try:
            return self.create_appointment(data), True
        except SlotUnavailableException:
            # otra petición idéntica pudo ganar la carrera
            existing = self.repository.find_active_exact(vet_id, pet_id, appointment_date, time_slot)
            if existing is None:
                raise
            return self._to_response_model(existing), False

    def update_appointment(self, appointment_id: int, data: AppointmentUpdate) -> Appointment:
        """
        Actualiza una cita con el conjunto completo de campos.

        La regla de fecha no pasada solo se aplica si la fecha cambia, para
        poder completar o cancelar citas de días anteriores.

        Args:
            appointment_id: ID de la cita
            data: campos nuevos y la versión leída por el cliente

        Raises:
            NotFoundException: la cita no existe
            StaleWriteException: la versión no coincide con la almacenada
            ValidationException: datos inválidos
            BusinessException: transición de estado no permitida
            SlotUnavailableException: la nueva franja está ocupada
        """
        appointment = self.repository.get_by_id_or_fail(appointment_id)

        if data.version != appointment.version:
            raise StaleWriteException(resource="Cita", identifier=str(appointment_id))

        self._validate_required(data)
        if data.appointment_date != appointment.appointment_date:
            self._validate_not_past(data.appointment_date)
        self._validate_references(data.vet_id, data.pet_id)

        if not can_transition(appointment.status, data.status):
            raise BusinessException(
                f"No se puede cambiar el estado de '{appointment.status.value}' a '{data.status.value}'",
                details={"from": appointment.status.value, "to": data.status.value},
            )

        slot_changed = (
            data.vet_id != appointment.vet_id
            or data.appointment_date != appointment.appointment_date
            or data.time_slot != appointment.time_slot
        )
        if slot_changed and data.status in ACTIVE_STATUSES:
            self.conflict_checker.ensure_slot_available(
                data.vet_id, data.appointment_date, data.time_slot, exclude_id=appointment.id
            )

        appointment.vet_id = data.vet_id
        appointment.pet_id = data.pet_id
        appointment.appointment_date = data.appointment_date
        appointment.time_slot = data.time_slot
        appointment.status = data.status
        appointment.notes = data.notes

        updated = self.repository.update(appointment)
        self.repository.commit()

        logger.info(f"Appointment {appointment_id} updated to version {updated.version}")

        return self._to_response_model(updated)

    def cancel_appointment(self, appointment_id: int) -> Appointment:
        """
        Cancela una cita; la fila se conserva y la franja queda libre.

        Raises:
            NotFoundException: la cita no existe
            BusinessException: la cita ya está completada o cancelada
        """
        appointment = self.repository.get_by_id_or_fail(appointment_id)

        if appointment.status not in ACTIVE_STATUSES:
            raise BusinessException(
                f"No se puede cancelar una cita en estado '{appointment.status.value}'"
            )

        appointment.status = AppointmentStatus.canceled
        updated = self.repository.update(appointment)
        self.repository.commit()

        logger.info(f"Appointment {appointment_id} canceled")

        return self._to_response_model(updated)

    def delete_appointment(self, appointment_id: int) -> None:
        """Elimina físicamente la cita (acción administrativa)."""
        self.delete(appointment_id)

    def batch_confirm(self, ids: Iterable[int]) -> int:
        """Confirma las citas pendientes de la lista; las demás se ignoran."""
        return self._batch_transition(
            ids,
            eligible={AppointmentStatus.pending_confirmation},
            target=AppointmentStatus.confirmed,
        )

    def batch_cancel(self, ids: Iterable[int]) -> int:
        """Cancela las citas pendientes o confirmadas de la lista; las demás se ignoran."""
        return self._batch_transition(
            ids,
            eligible=set(ACTIVE_STATUSES),
            target=AppointmentStatus.canceled,
        )

    def _batch_transition(self, ids: Iterable[int], eligible: set, target: AppointmentStatus) -> int:
        count = 0
        for appointment_id in dict.fromkeys(ids):
            appointment = self.repository.get_by_id(appointment_id)
            if appointment is None or appointment.status not in eligible:
                continue
            appointment.status = target
            try:
                self.repository.update(appointment)
                self.repository.commit()
            except ConflictException as e:
                logger.warning(f"Batch {target.value} skipped appointment {appointment_id}: {e.message}")
                continue
            count += 1

        logger.info(f"Batch {target.value}: {count} appointment(s) changed")
        return count

    # ==================== Consultas ====================

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repository.get_by_id_or_fail(appointment_id)
        return self._to_response_model(appointment)

    def list_by_vet_and_date(self, vet_id: int, appointment_date: date) -> List[Appointment]:
        return self.to_response_list(self.repository.find_by_vet_and_date(vet_id, appointment_date))

    def list_by_owner(self, owner_id: int) -> List[Appointment]:
        """Citas de todas las mascotas del propietario (404 si no existe)."""
        self.owner_repo.get_by_id_or_fail(owner_id)
        return self.to_response_list(self.repository.find_by_owner(owner_id))

    def list_by_date(self, appointment_date: date) -> List[Appointment]:
        return self.to_response_list(self.repository.find_by_date(appointment_date))

    def list_by_vet_and_week(
        self,
        vet_id: int,
        day: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> List[Appointment]:
        """
        Citas de un veterinario en una semana.

        Sin rango explícito se usa la semana lunes-domingo que contiene `day`
        (hoy si no se indica).
        """
        self.vet_repo.get_by_id_or_fail(vet_id)
        start, end = self._resolve_week(day, start, end)
        return self.to_response_list(self.repository.find_by_vet_and_week(vet_id, start, end))

    def list_upcoming_for_vet(self, vet_id: int) -> List[Appointment]:
        self.vet_repo.get_by_id_or_fail(vet_id)
        return self.to_response_list(self.repository.find_by_vet(vet_id, self.today()))

    def list_by_pet(self, pet_id: int) -> List[Appointment]:
        self.pet_repo.get_by_id_or_fail(pet_id)
        return self.to_response_list(self.repository.find_by_pet(pet_id))

    def get_available_time_slots(self, vet_id: int, appointment_date: date) -> List[TimeSlot]:
        """
        Franjas libres de un veterinario en un día, en orden cronológico.

        Args:
            vet_id: ID del veterinario
            appointment_date: Día a consultar
        """
        self.vet_repo.get_by_id_or_fail(vet_id)
        booked = {
            a.time_slot
            for a in self.repository.find_by_vet_and_date(vet_id, appointment_date)
            if a.status != AppointmentStatus.canceled
        }
        return [slot for slot in TimeSlot.ordered() if slot not in booked]

    def get_appointment_stats(
        self,
        vet_id: int,
        week_start: Optional[date] = None,
        week_end: Optional[date] = None
    ) -> AppointmentStats:
        """Totales de la semana: total, completadas, canceladas y pendientes (el resto)."""
        self.vet_repo.get_by_id_or_fail(vet_id)
        week_start, week_end = self._resolve_week(None, week_start, week_end)
        if week_end < week_start:
            raise ValidationException(
                message="El fin de semana no puede ser anterior al inicio",
                field="week_end"
            )
        return AppointmentStats(
            total=self.repository.count_by_vet_and_week(vet_id, week_start, week_end),
            completed=self.repository.count_by_vet_and_week(
                vet_id, week_start, week_end, AppointmentStatus.completed
            ),
            cancelled=self.repository.count_by_vet_and_week(
                vet_id, week_start, week_end, AppointmentStatus.canceled
            ),
        )

    def get_vet_schedule(self, vet_id: int, day: Optional[date] = None) -> VetSchedule:
        """
        Agenda semanal de un veterinario con navegación a semanas vecinas.

        Args:
            vet_id: ID del veterinario
            day: cualquier día de la semana a mostrar (hoy por defecto)
        """
        vet = self.vet_repo.get_by_id_or_fail(vet_id)
        current = day or self.today()
        week_start, week_end = week_bounds(current)

        appointments = self.to_response_list(
            self.repository.find_by_vet_and_week(vet_id, week_start, week_end)
        )

        return VetSchedule(
            vet_id=vet.id,
            vet_name=vet.full_name,
            current_date=current,
            week_start=week_start,
            week_end=week_end,
            previous_week_date=current - timedelta(weeks=1),
            next_week_date=current + timedelta(weeks=1),
            appointments=appointments,
            stats=self.get_appointment_stats(vet_id, week_start, week_end),
        )

    # ==================== Helpers ====================

    def _resolve_week(
        self,
        day: Optional[date],
        start: Optional[date],
        end: Optional[date]
    ) -> Tuple[date, date]:
        default_start, default_end = week_bounds(day or start or self.today())
        return start or default_start, end or default_end

    def to_response_list(self, appointments: Iterable[AppointmentORM]) -> List[Appointment]:
        cache: Dict[tuple, object] = {}
        return [self._to_response_model(a, cache) for a in appointments]

    def _lookup(self, cache: Optional[dict], repo, key: Optional[int]):
        if key is None:
            return None
        if cache is None:
            return repo.get_by_id(key)
        cache_key = (repo.resource_name, key)
        if cache_key not in cache:
            cache[cache_key] = repo.get_by_id(key)
        return cache[cache_key]

    def _to_response_model(self, appointment: AppointmentORM, cache: Optional[dict] = None) -> Appointment:
        """
        Convierte la cita ORM al modelo de respuesta con nombres para mostrar.

        Las referencias se resuelven con búsquedas explícitas en cada repositorio.
        """
        pet = self._lookup(cache, self.pet_repo, appointment.pet_id)
        owner = self._lookup(cache, self.owner_repo, pet.owner_id if pet else None)
        vet = self._lookup(cache, self.vet_repo, appointment.vet_id)

        return Appointment(
            id=appointment.id,
            appointment_date=appointment.appointment_date,
            time_slot=appointment.time_slot,
            pet_id=appointment.pet_id,
            vet_id=appointment.vet_id,
            status=appointment.status,
            notes=appointment.notes,
            version=appointment.version,
            pet_name=pet.name if pet else None,
            owner_id=owner.id if owner else None,
            owner_name=f"{owner.first_name} {owner.last_name}" if owner else None,
            vet_name=vet.full_name if vet else None,
        )
