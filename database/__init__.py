from .db import (
    SessionLocal,
    create_tables,
    engine,
    get_db,
    get_database_url,
    hash_password,
    verify_password,
)
from .models import (
    Base,
    UserORM,
    OwnerORM,
    PetTypeORM,
    PetORM,
    SpecialtyORM,
    VetORM,
    VisitORM,
    AppointmentORM,
)

__all__ = [
    "SessionLocal",
    "create_tables",
    "engine",
    "get_db",
    "get_database_url",
    "hash_password",
    "verify_password",
    "Base",
    "UserORM",
    "OwnerORM",
    "PetTypeORM",
    "PetORM",
    "SpecialtyORM",
    "VetORM",
    "VisitORM",
    "AppointmentORM",
]
