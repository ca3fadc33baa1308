"""
Configuración de fixtures para pytest.

Este módulo contiene fixtures reutilizables para todos los tests.
"""

import pytest
import os
from typing import Callable, Generator, Dict
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Configurar para usar base de datos en memoria para tests
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from main import app
from database.db import get_db, Base, hash_password
from database.models import (
    AppointmentORM,
    OwnerORM,
    PetORM,
    PetTypeORM,
    UserORM,
    VetORM,
    SpecialtyORM,
)
from models.appointments import AppointmentStatus, TimeSlot
from repositories import (
    AppointmentRepository,
    OwnerRepository,
    PetRepository,
    VetRepository,
)
from services.appointment_service import AppointmentService
from services.conflict_checker import ConflictChecker
from auth import create_access_token
from utils.datetime_utils import get_local_today

# Lunes 7 de enero de 2030, 08:00 UTC
FIXED_NOW = datetime(2030, 1, 7, 8, 0, tzinfo=ZoneInfo("UTC"))


def fixed_clock(now: datetime = FIXED_NOW) -> Callable[[], datetime]:
    """Reloj que siempre devuelve `now`."""
    return lambda: now


# ==================== Database Fixtures ====================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database session override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==================== User Fixtures ====================

def _create_user(db_session: Session, username: str, role: str) -> UserORM:
    salt_hex, hash_hex = hash_password("password123")
    user = UserORM(
        username=username,
        full_name=f"{username.title()} Test",
        role=role,
        password_salt=salt_hex,
        password_hash=hash_hex,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session: Session) -> UserORM:
    """Create an admin account in the database."""
    return _create_user(db_session, "testadmin", "admin")


@pytest.fixture
def receptionist_user(db_session: Session) -> UserORM:
    """Create a receptionist account in the database."""
    return _create_user(db_session, "testdesk", "receptionist")


# ==================== Auth Token Fixtures ====================

@pytest.fixture
def admin_token(admin_user: UserORM) -> str:
    """Generate a valid JWT token for the admin account."""
    return create_access_token(data={"sub": admin_user.id})


@pytest.fixture
def receptionist_token(receptionist_user: UserORM) -> str:
    """Generate a valid JWT token for the receptionist account."""
    return create_access_token(data={"sub": receptionist_user.id})


@pytest.fixture
def auth_headers_admin(admin_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def auth_headers(receptionist_token: str) -> Dict[str, str]:
    """Authentication headers for a non-admin staff member."""
    return {"Authorization": f"Bearer {receptionist_token}"}


# ==================== Clinic Fixtures ====================

@pytest.fixture
def pet_types(db_session: Session) -> Dict[str, PetTypeORM]:
    """Create the dog, cat and bird pet types."""
    types = {name: PetTypeORM(name=name) for name in ("dog", "cat", "bird")}
    db_session.add_all(types.values())
    db_session.commit()
    return types


@pytest.fixture
def owner(db_session: Session) -> OwnerORM:
    owner = OwnerORM(
        first_name="George",
        last_name="Franklin",
        address="110 W. Liberty St.",
        city="Madison",
        telephone="6085551023",
        email="george@example.com",
    )
    db_session.add(owner)
    db_session.commit()
    db_session.refresh(owner)
    return owner


@pytest.fixture
def other_owner(db_session: Session) -> OwnerORM:
    owner = OwnerORM(
        first_name="Betty",
        last_name="Davis",
        address="638 Cardinal Ave.",
        city="Sun Prairie",
        telephone="6085551749",
    )
    db_session.add(owner)
    db_session.commit()
    db_session.refresh(owner)
    return owner


@pytest.fixture
def pet(db_session: Session, owner: OwnerORM, pet_types: Dict[str, PetTypeORM]) -> PetORM:
    pet = PetORM(name="Leo", birth_date=date(2020, 9, 7), type_id=pet_types["cat"].id, owner_id=owner.id)
    db_session.add(pet)
    db_session.commit()
    db_session.refresh(pet)
    return pet


@pytest.fixture
def other_pet(db_session: Session, other_owner: OwnerORM, pet_types: Dict[str, PetTypeORM]) -> PetORM:
    pet = PetORM(name="Basil", birth_date=date(2021, 8, 6), type_id=pet_types["dog"].id, owner_id=other_owner.id)
    db_session.add(pet)
    db_session.commit()
    db_session.refresh(pet)
    return pet


@pytest.fixture
def vet(db_session: Session) -> VetORM:
    vet = VetORM(first_name="James", last_name="Carter")
    db_session.add(vet)
    db_session.commit()
    db_session.refresh(vet)
    return vet


@pytest.fixture
def other_vet(db_session: Session) -> VetORM:
    vet = VetORM(first_name="Helen", last_name="Leary")
    vet.specialties = [SpecialtyORM(name="radiology")]
    db_session.add(vet)
    db_session.commit()
    db_session.refresh(vet)
    return vet


@pytest.fixture
def today() -> date:
    return get_local_today()


@pytest.fixture
def tomorrow(today: date) -> date:
    return today + timedelta(days=1)


@pytest.fixture
def make_appointment(db_session: Session) -> Callable[..., AppointmentORM]:
    """Factory that inserts an appointment directly, bypassing the service rules."""
    def _make(
        vet: VetORM,
        pet: PetORM,
        appointment_date: date,
        time_slot: TimeSlot = TimeSlot.SLOT_0900_1000,
        status: AppointmentStatus = AppointmentStatus.pending_confirmation,
        notes: str = None,
    ) -> AppointmentORM:
        appointment = AppointmentORM(
            vet_id=vet.id,
            pet_id=pet.id,
            appointment_date=appointment_date,
            time_slot=time_slot,
            status=status,
            notes=notes,
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment

    return _make


# ==================== Service Fixtures ====================

@pytest.fixture
def appointment_service(db_session: Session) -> AppointmentService:
    """AppointmentService whose clock is fixed at FIXED_NOW."""
    appointment_repo = AppointmentRepository(db_session)
    return AppointmentService(
        appointment_repo,
        VetRepository(db_session),
        PetRepository(db_session),
        OwnerRepository(db_session),
        ConflictChecker(appointment_repo),
        clock=fixed_clock(),
    )
