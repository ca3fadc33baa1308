"""
Verificación de disponibilidad de franjas.

Es una comprobación rápida previa a la escritura: el índice único parcial de
`appointments` sigue siendo quien decide cuando dos reservas compiten.
"""

from datetime import date
from typing import Optional
import logging

from repositories.appointment_repository import AppointmentRepository
from models.appointments import TimeSlot
from core.exceptions import SlotUnavailableException

logger = logging.getLogger(__name__)


class ConflictChecker:
    """Decide si un veterinario puede recibir una cita en (fecha, franja)."""

    def __init__(self, appointment_repository: AppointmentRepository):
        self.appointment_repo = appointment_repository

    def is_slot_available(
        self,
        vet_id: int,
        appointment_date: date,
        time_slot: TimeSlot,
        exclude_id: Optional[int] = None
    ) -> bool:
        """
        Devuelve False si otra cita no cancelada ocupa la franja.

        Args:
            vet_id: ID del veterinario
            appointment_date: Día solicitado
            time_slot: Franja solicitada
            exclude_id: Cita a ignorar (la propia al mover una cita)
        """
        holder = self.appointment_repo.find_active_by_slot(
            vet_id, appointment_date, time_slot, exclude_id=exclude_id
        )
        return holder is None

    def ensure_slot_available(
        self,
        vet_id: int,
        appointment_date: date,
        time_slot: TimeSlot,
        exclude_id: Optional[int] = None
    ) -> None:
        if not self.is_slot_available(vet_id, appointment_date, time_slot, exclude_id):
            logger.info(f"Slot {time_slot.value} on {appointment_date} already taken for vet {vet_id}")
            raise SlotUnavailableException(
                vet_id=vet_id,
                appointment_date=appointment_date,
                time_slot=time_slot,
            )
