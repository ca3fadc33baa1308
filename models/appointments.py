from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import Optional, List, Dict
from datetime import date, datetime, time
from enum import Enum
from zoneinfo import ZoneInfo


class TimeSlot(str, Enum):
    """Franjas reservables del día, en orden cronológico."""
    SLOT_0900_1000 = "09:00-10:00"
    SLOT_1000_1100 = "10:00-11:00"
    SLOT_1100_1200 = "11:00-12:00"
    SLOT_1400_1500 = "14:00-15:00"
    SLOT_1500_1600 = "15:00-16:00"
    SLOT_1600_1700 = "16:00-17:00"

    @classmethod
    def ordered(cls) -> List["TimeSlot"]:
        return list(cls)

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def start_time(self) -> time:
        return time.fromisoformat(self.value.split("-")[0])

    @property
    def end_time(self) -> time:
        return time.fromisoformat(self.value.split("-")[1])

    @property
    def sort_key(self) -> int:
        return TimeSlot.ordered().index(self)

    def start_datetime(self, day: date, tz: ZoneInfo) -> datetime:
        """Instante de inicio de la franja en el día dado y la zona de la clínica."""
        return datetime.combine(day, self.start_time, tzinfo=tz)


class AppointmentStatus(str, Enum):
    pending_confirmation = "pending_confirmation"
    confirmed = "confirmed"
    completed = "completed"
    canceled = "canceled"


# completed y canceled son terminales
ALLOWED_TRANSITIONS: Dict[AppointmentStatus, frozenset] = {
    AppointmentStatus.pending_confirmation: frozenset({
        AppointmentStatus.confirmed,
        AppointmentStatus.canceled,
    }),
    AppointmentStatus.confirmed: frozenset({
        AppointmentStatus.completed,
        AppointmentStatus.canceled,
    }),
    AppointmentStatus.completed: frozenset(),
    AppointmentStatus.canceled: frozenset(),
}

ACTIVE_STATUSES = frozenset({AppointmentStatus.pending_confirmation, AppointmentStatus.confirmed})
INITIAL_STATUSES = ACTIVE_STATUSES


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    """True si la cita puede pasar de `current` a `target` (mantener el estado siempre es válido)."""
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS[current]


class AppointmentCreate(BaseModel):
    """
    Crear una nueva cita.

    Los campos obligatorios se declaran opcionales a propósito: la ausencia
    se reporta como error de validación del servicio con el nombre del campo.
    """
    vet_id: Optional[int] = None
    pet_id: Optional[int] = None
    appointment_date: Optional[date] = None
    time_slot: Optional[TimeSlot] = None
    status: Optional[AppointmentStatus] = AppointmentStatus.pending_confirmation
    notes: Optional[str] = Field(None, max_length=500)


class AppointmentUpdate(AppointmentCreate):
    """
    Actualizar una cita existente. `version` es la versión leída por el cliente.

    El estado no tiene valor por defecto: una actualización lo envía siempre.
    """
    status: Optional[AppointmentStatus] = None
    version: int = Field(..., ge=1)


class AppointmentIdempotentCreate(BaseModel):
    vet_id: int
    pet_id: int
    appointment_date: date
    time_slot: TimeSlot
    notes: Optional[str] = Field(None, max_length=500)


class Appointment(BaseModel):
    """
    Modelo de respuesta de Cita.

    Incluye los nombres de mascota, propietario y veterinario para mostrar.
    """
    id: int
    appointment_date: date
    time_slot: TimeSlot
    pet_id: int
    vet_id: int
    status: AppointmentStatus
    notes: Optional[str] = None
    version: int
    pet_name: Optional[str] = None
    owner_id: Optional[int] = None
    owner_name: Optional[str] = None
    vet_name: Optional[str] = None


class IdempotentAppointmentResult(BaseModel):
    created: bool
    appointment: Appointment


class BatchRequest(BaseModel):
    ids: List[int] = Field(default_factory=list)


class BatchResult(BaseModel):
    count: int = Field(..., ge=0, description="Citas efectivamente modificadas")


class AppointmentStats(BaseModel):
    total: int = 0
    completed: int = 0
    cancelled: int = 0

    @computed_field
    @property
    def pending(self) -> int:
        return self.total - self.completed - self.cancelled


class VetSchedule(BaseModel):
    vet_id: int
    vet_name: str
    current_date: date
    week_start: date
    week_end: date
    previous_week_date: date
    next_week_date: date
    appointments: List[Appointment]
    stats: AppointmentStats


class TimeSlotInfo(BaseModel):
    name: str
    label: str
    start: time
    end: time


class ReminderReport(BaseModel):
    appointments: int = 0
    sent: int = 0
    failed: int = 0
    by_strategy: Dict[str, int] = Field(default_factory=dict)


class ReminderContext(BaseModel):
    """Instantánea de solo lectura con lo necesario para recordar una cita."""
    model_config = ConfigDict(frozen=True)

    appointment_id: int
    appointment_date: date
    time_slot: TimeSlot
    notes: Optional[str] = None
    pet_name: str
    owner_name: str
    owner_email: Optional[str] = None
    vet_id: int
    vet_name: str
