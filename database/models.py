from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    Text,
    ForeignKey,
    Date,
    Table,
    Index,
    Enum as SAEnum,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

from models.appointments import AppointmentStatus, TimeSlot
from models.visits import VaccinationStatus

Base = declarative_base()


def get_current_time():
    """Obtiene la hora actual en la zona horaria local configurada."""
    from utils.datetime_utils import get_local_now
    return get_local_now().replace(tzinfo=None)


#ORM: Usuarios del personal de la clínica
class UserORM(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    full_name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default="receptionist")
    password_salt = Column(String(64), nullable=False)
    password_hash = Column(String(128), nullable=False)
    created_at = Column(DateTime, default=get_current_time)


#ORM: Propietarios
class OwnerORM(Base):
    __tablename__ = "owners"
    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(30), nullable=False)
    last_name = Column(String(30), nullable=False, index=True)
    address = Column(String(255), nullable=False)
    city = Column(String(80), nullable=False)
    telephone = Column(String(20), nullable=False)
    email = Column(String(120), nullable=True)


#ORM: Tipos de mascota (perro, gato, ...)
class PetTypeORM(Base):
    __tablename__ = "pet_types"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(80), nullable=False, unique=True)


#ORM: Mascotas
class PetORM(Base):
    __tablename__ = "pets"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(30), nullable=False)
    birth_date = Column(Date, nullable=True)
    type_id = Column(Integer, ForeignKey("pet_types.id"), nullable=False)
    owner_id = Column(Integer, ForeignKey("owners.id"), nullable=False, index=True)


vet_specialties = Table(
    "vet_specialties",
    Base.metadata,
    Column("vet_id", Integer, ForeignKey("vets.id"), primary_key=True),
    Column("specialty_id", Integer, ForeignKey("specialties.id"), primary_key=True),
)


#ORM: Especialidades
class SpecialtyORM(Base):
    __tablename__ = "specialties"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(80), nullable=False, unique=True)


#ORM: Veterinarios
class VetORM(Base):
    __tablename__ = "vets"
    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(30), nullable=False)
    last_name = Column(String(30), nullable=False)

    #Relationship: especialidades del veterinario
    specialties = relationship("SpecialtyORM", secondary=vet_specialties, lazy="selectin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


#ORM: Visitas
class VisitORM(Base):
    __tablename__ = "visits"
    id = Column(Integer, primary_key=True, autoincrement=True)
    pet_id = Column(Integer, ForeignKey("pets.id"), nullable=False, index=True)
    visit_date = Column(Date, nullable=False, index=True)
    description = Column(String(255), nullable=False)
    vaccination_status = Column(SAEnum(VaccinationStatus, native_enum=False, length=30), nullable=True)
    vaccination_date = Column(Date, nullable=True)


#ORM: Citas
class AppointmentORM(Base):
    __tablename__ = "appointments"
    id = Column(Integer, primary_key=True, autoincrement=True)
    appointment_date = Column(Date, nullable=False)
    time_slot = Column(SAEnum(TimeSlot, native_enum=False, length=20), nullable=False)
    pet_id = Column(Integer, ForeignKey("pets.id"), nullable=False, index=True)
    vet_id = Column(Integer, ForeignKey("vets.id"), nullable=False)
    status = Column(
        SAEnum(AppointmentStatus, native_enum=False, length=30),
        nullable=False,
        default=AppointmentStatus.pending_confirmation,
    )
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=get_current_time)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time)

    # el ORM incrementa `version` en cada UPDATE y falla con StaleDataError si no coincide
    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        # una sola cita activa por veterinario/fecha/franja; las canceladas liberan el hueco
        Index(
            "uq_appointments_vet_date_slot",
            "vet_id",
            "appointment_date",
            "time_slot",
            unique=True,
            sqlite_where=text("status != 'canceled'"),
            postgresql_where=text("status != 'canceled'"),
        ),
        Index("ix_appointments_date", "appointment_date"),
    )


__all__ = [
    "Base",
    "UserORM",
    "OwnerORM",
    "PetTypeORM",
    "PetORM",
    "SpecialtyORM",
    "VetORM",
    "VisitORM",
    "AppointmentORM",
    "vet_specialties",
]
