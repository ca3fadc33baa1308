"""
Envío de recordatorios de citas próximas.

Las estrategias de notificación se registran por nombre en un mapa de
funciones `ReminderContext -> None`. Cada invocación queda aislada: un
fallo se registra y se cuenta, pero no detiene al resto.
"""

from typing import Callable, Dict, Iterable, List, Mapping, Optional
from datetime import datetime, timedelta, timezone
import logging

from repositories.appointment_repository import AppointmentRepository
from repositories.owner_repository import OwnerRepository
from repositories.pet_repository import PetRepository
from repositories.vet_repository import VetRepository
from database.models import AppointmentORM
from models.appointments import ACTIVE_STATUSES, ReminderContext, ReminderReport
from core.exceptions import ValidationException
from utils.datetime_utils import get_local_now

logger = logging.getLogger(__name__)

ReminderStrategy = Callable[[ReminderContext], None]


def log_reminder(context: ReminderContext) -> None:
    message = (
        f"Reminder: {context.vet_name} has an appointment on {context.appointment_date} "
        f"at {context.time_slot.display_name} with {context.pet_name} "
        f"(owner {context.owner_name})"
    )
    if context.notes:
        message += f". Notes: {context.notes}"
    logger.info(message)


def make_email_reminder(email_domain: str) -> ReminderStrategy:
    """
    Construye la estrategia de correo para un dominio de la clínica.

    El transporte real queda fuera del servicio: el mensaje se compone y se
    registra como envío simulado al veterinario y, si lo tiene, al propietario.
    """
    def email_reminder(context: ReminderContext) -> None:
        recipients = [f"{context.vet_id}@{email_domain}"]
        if context.owner_email:
            recipients.append(context.owner_email)
        subject = f"Recordatorio de cita: {context.pet_name} el {context.appointment_date}"
        body = (
            f"Cita con {context.vet_name} el {context.appointment_date} "
            f"en la franja {context.time_slot.display_name}.\n"
            f"Mascota: {context.pet_name}\n"
            f"Propietario: {context.owner_name}"
        )
        if context.notes:
            body += f"\nNotas: {context.notes}"
        logger.info(f"Sending reminder email to {', '.join(recipients)}: {subject}")
        logger.debug(body)

    return email_reminder


def build_strategies(names: Iterable[str], email_domain: str) -> Dict[str, ReminderStrategy]:
    """
    Crea el mapa nombre -> estrategia para los nombres configurados.

    Raises:
        ValidationException: si algún nombre no corresponde a una estrategia conocida
    """
    available: Dict[str, ReminderStrategy] = {
        "log": log_reminder,
        "email": make_email_reminder(email_domain),
    }
    strategies: Dict[str, ReminderStrategy] = {}
    for name in names:
        if name not in available:
            raise ValidationException(
                message=f"Estrategia de recordatorio desconocida: {name}",
                field="strategies"
            )
        strategies[name] = available[name]
    return strategies


class ReminderService:
    """Selecciona las citas próximas y les aplica las estrategias registradas."""

    def __init__(
        self,
        appointment_repository: AppointmentRepository,
        pet_repository: PetRepository,
        owner_repository: OwnerRepository,
        vet_repository: VetRepository,
        strategies: Mapping[str, ReminderStrategy],
        lookahead_hours: int = 24,
        clock: Callable[[], datetime] = get_local_now
    ):
        self.appointment_repo = appointment_repository
        self.pet_repo = pet_repository
        self.owner_repo = owner_repository
        self.vet_repo = vet_repository
        self.strategies = dict(strategies)
        self.lookahead = timedelta(hours=lookahead_hours)
        self.clock = clock

    def find_upcoming(self, now: Optional[datetime] = None) -> List[AppointmentORM]:
        """
        Citas pendientes o confirmadas que empiezan en [now, now + lookahead).

        La hora de inicio es la fecha de la cita más el inicio de su franja,
        en la zona horaria de `now`.

        Args:
            now: instante de referencia (con zona); por defecto el reloj del servicio
        """
        now = now or self.clock()
        # en UTC la ventana mide horas reales aunque haya cambio de hora
        now_utc = now.astimezone(timezone.utc)
        window_end = now_utc + self.lookahead
        candidates = self.appointment_repo.find_upcoming(
            ACTIVE_STATUSES, now.date(), window_end.astimezone(now.tzinfo).date()
        )
        return [
            a for a in candidates
            if now_utc <= self._start_utc(a, now) < window_end
        ]

    @staticmethod
    def _start_utc(appointment: AppointmentORM, now: datetime) -> datetime:
        start = appointment.time_slot.start_datetime(appointment.appointment_date, now.tzinfo)
        return start.astimezone(timezone.utc)

    def dispatch(
        self,
        now: Optional[datetime] = None,
        strategy_names: Optional[Iterable[str]] = None
    ) -> ReminderReport:
        """
        Envía recordatorios de las citas próximas con las estrategias elegidas.

        Args:
            now: instante de referencia
            strategy_names: subconjunto de estrategias; todas las registradas si es None

        Returns:
            Resumen con citas procesadas, envíos correctos y fallidos

        Raises:
            ValidationException: si se pide una estrategia no registrada
        """
        selected = self._select_strategies(strategy_names)
        appointments = self.find_upcoming(now)
        report = ReminderReport(
            appointments=len(appointments),
            by_strategy={name: 0 for name in selected},
        )

        for appointment in appointments:
            context = self.build_context(appointment)
            for name, strategy in selected.items():
                try:
                    strategy(context)
                except Exception as e:
                    report.failed += 1
                    logger.error(
                        f"Reminder strategy '{name}' failed for appointment {appointment.id}: {e}",
                        exc_info=True
                    )
                    continue
                report.sent += 1
                report.by_strategy[name] += 1

        logger.info(
            f"Reminders dispatched: {report.appointments} appointment(s), "
            f"{report.sent} sent, {report.failed} failed"
        )
        return report

    def build_context(self, appointment: AppointmentORM) -> ReminderContext:
        pet = self.pet_repo.get_by_id(appointment.pet_id)
        owner = self.owner_repo.get_by_id(pet.owner_id) if pet else None
        vet = self.vet_repo.get_by_id(appointment.vet_id)
        return ReminderContext(
            appointment_id=appointment.id,
            appointment_date=appointment.appointment_date,
            time_slot=appointment.time_slot,
            notes=appointment.notes,
            pet_name=pet.name if pet else "",
            owner_name=f"{owner.first_name} {owner.last_name}" if owner else "",
            owner_email=owner.email if owner else None,
            vet_id=appointment.vet_id,
            vet_name=vet.full_name if vet else "",
        )

    def _select_strategies(self, names: Optional[Iterable[str]]) -> Dict[str, ReminderStrategy]:
        if names is None:
            return dict(self.strategies)
        selected = {}
        for name in names:
            if name not in self.strategies:
                raise ValidationException(
                    message=f"Estrategia de recordatorio no registrada: {name}",
                    field="strategies"
                )
            selected[name] = self.strategies[name]
        return selected
