"""
Capa de repositorio para el acceso a datos.
Este paquete contiene clases de repositorio que gestionan todas las operaciones de la base de datos.
Los repositorios proporcionan una abstracción sobre el ORM y no deben contener
lógica de negocio.
"""

from .base_repository import BaseRepository
from .appointment_repository import AppointmentRepository
from .owner_repository import OwnerRepository
from .pet_repository import PetRepository
from .vet_repository import VetRepository
from .visit_repository import VisitRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "AppointmentRepository",
    "OwnerRepository",
    "PetRepository",
    "VetRepository",
    "VisitRepository",
    "UserRepository",
]
