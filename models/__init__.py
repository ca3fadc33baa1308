from .appointments import (
    Appointment,
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentIdempotentCreate,
    AppointmentStatus,
    AppointmentStats,
    BatchRequest,
    BatchResult,
    IdempotentAppointmentResult,
    ReminderContext,
    ReminderReport,
    TimeSlot,
    TimeSlotInfo,
    VetSchedule,
)
from .owners import Owner, OwnerCreate, OwnerUpdate, Pet, PetCreate, PetUpdate, PetType
from .vets import Vet, VetCreate
from .visits import Visit, VisitCreate, VisitUpdate, VaccinationStatus, RecentVisit
from .users import User, UserCreate, Role
from .stats import CityCount, DashboardStats, VisitTrendPoint, PetTypeCount
from .common import (
    DeleteResponse,
    HealthCheckResponse,
    create_delete_response,
)

__all__ = [
    # Citas
    "Appointment", "AppointmentCreate", "AppointmentUpdate", "AppointmentIdempotentCreate",
    "AppointmentStatus", "AppointmentStats", "BatchRequest", "BatchResult",
    "IdempotentAppointmentResult", "ReminderContext", "ReminderReport", "TimeSlot", "TimeSlotInfo", "VetSchedule",
    # Propietarios y mascotas
    "Owner", "OwnerCreate", "OwnerUpdate", "Pet", "PetCreate", "PetUpdate", "PetType",
    # Veterinarios
    "Vet", "VetCreate",
    # Visitas
    "Visit", "VisitCreate", "VisitUpdate", "VaccinationStatus", "RecentVisit",
    # Usuarios
    "User", "UserCreate", "Role",
    # Estadísticas
    "CityCount", "DashboardStats", "VisitTrendPoint", "PetTypeCount",
    # Common responses
    "DeleteResponse", "HealthCheckResponse",
    "create_delete_response",
]
