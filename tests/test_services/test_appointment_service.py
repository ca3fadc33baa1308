"""
Tests for AppointmentService.

Tests cover:
- Booking rules (required fields, past dates, references, slot conflicts)
- Idempotent booking
- Updates with optimistic versioning and status transitions
- Cancel and batch operations
- Queries (available slots, weekly stats, schedule)
"""

import pytest
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session

from database.models import AppointmentORM
from repositories import AppointmentRepository, OwnerRepository, PetRepository, VetRepository
from services.appointment_service import AppointmentService
from services.conflict_checker import ConflictChecker
from models.appointments import (
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    TimeSlot,
)
from core.exceptions import (
    BusinessException,
    NotFoundException,
    SlotUnavailableException,
    StaleWriteException,
    ValidationException,
)

# Clock of the service fixture is Monday 2030-01-07
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)


def _create_data(vet, pet, appointment_date=TUESDAY, time_slot=TimeSlot.SLOT_0900_1000, **kwargs):
    return AppointmentCreate(
        vet_id=vet.id,
        pet_id=pet.id,
        appointment_date=appointment_date,
        time_slot=time_slot,
        **kwargs
    )


def _update_data(appointment, **changes):
    fields = {
        "vet_id": appointment.vet_id,
        "pet_id": appointment.pet_id,
        "appointment_date": appointment.appointment_date,
        "time_slot": appointment.time_slot,
        "status": appointment.status,
        "notes": appointment.notes,
        "version": appointment.version,
    }
    fields.update(changes)
    return AppointmentUpdate(**fields)


class TestCreateAppointment:
    """Tests for create_appointment."""

    def test_create_returns_pending_with_display_names(self, appointment_service, vet, pet, owner):
        """A new appointment defaults to pending and carries pet, owner and vet names."""
        created = appointment_service.create_appointment(_create_data(vet, pet, notes="Vacunación"))

        assert created.id is not None
        assert created.status == AppointmentStatus.pending_confirmation
        assert created.version == 1
        assert created.pet_name == "Leo"
        assert created.owner_id == owner.id
        assert created.owner_name == "George Franklin"
        assert created.vet_name == "James Carter"
        assert created.notes == "Vacunación"

    def test_create_today_is_allowed(self, appointment_service, vet, pet):
        created = appointment_service.create_appointment(_create_data(vet, pet, appointment_date=MONDAY))
        assert created.appointment_date == MONDAY

    def test_create_in_past_rejected(self, appointment_service, vet, pet):
        """Dates before today fail with a validation error on appointment_date."""
        with pytest.raises(ValidationException) as exc_info:
            appointment_service.create_appointment(
                _create_data(vet, pet, appointment_date=MONDAY - timedelta(days=1))
            )

        assert exc_info.value.details["field"] == "appointment_date"

    @pytest.mark.parametrize("missing", ["vet_id", "pet_id", "appointment_date", "time_slot", "status"])
    def test_create_missing_field_names_it(self, appointment_service, vet, pet, missing):
        data = _create_data(vet, pet)
        setattr(data, missing, None)

        with pytest.raises(ValidationException) as exc_info:
            appointment_service.create_appointment(data)

        assert exc_info.value.details["field"] == missing

    def test_create_unknown_vet_rejected(self, appointment_service, pet):
        data = AppointmentCreate(
            vet_id=9999, pet_id=pet.id, appointment_date=TUESDAY, time_slot=TimeSlot.SLOT_0900_1000
        )

        with pytest.raises(ValidationException) as exc_info:
            appointment_service.create_appointment(data)

        assert exc_info.value.details["field"] == "vet_id"

    def test_create_unknown_pet_rejected(self, appointment_service, vet):
        data = AppointmentCreate(
            vet_id=vet.id, pet_id=9999, appointment_date=TUESDAY, time_slot=TimeSlot.SLOT_0900_1000
        )

        with pytest.raises(ValidationException) as exc_info:
            appointment_service.create_appointment(data)

        assert exc_info.value.details["field"] == "pet_id"

    def test_create_terminal_status_rejected(self, appointment_service, vet, pet):
        with pytest.raises(ValidationException) as exc_info:
            appointment_service.create_appointment(
                _create_data(vet, pet, status=AppointmentStatus.completed)
            )

        assert exc_info.value.details["field"] == "status"

    def test_create_occupied_slot_rejected(self, appointment_service, vet, pet, other_pet):
        """A second active booking for the same vet, day and slot is a conflict."""
        appointment_service.create_appointment(_create_data(vet, pet))

        with pytest.raises(SlotUnavailableException) as exc_info:
            appointment_service.create_appointment(_create_data(vet, other_pet))

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["error"] == "slot_unavailable"

    def test_same_slot_with_other_vet_is_free(self, appointment_service, vet, other_vet, pet, other_pet):
        appointment_service.create_appointment(_create_data(vet, pet))
        created = appointment_service.create_appointment(_create_data(other_vet, other_pet))

        assert created.vet_id == other_vet.id

    def test_canceled_appointment_releases_slot(self, appointment_service, vet, pet, other_pet):
        first = appointment_service.create_appointment(_create_data(vet, pet))
        appointment_service.cancel_appointment(first.id)

        second = appointment_service.create_appointment(_create_data(vet, other_pet))

        assert second.id != first.id
        assert second.status == AppointmentStatus.pending_confirmation


class TestCreateAppointmentIdempotent:
    """Tests for create_appointment_idempotent."""

    def test_second_call_returns_same_appointment(self, appointment_service, db_session: Session, vet, pet):
        first, created_first = appointment_service.create_appointment_idempotent(
            vet.id, pet.id, TUESDAY, TimeSlot.SLOT_1000_1100
        )
        second, created_second = appointment_service.create_appointment_idempotent(
            vet.id, pet.id, TUESDAY, TimeSlot.SLOT_1000_1100
        )

        assert created_first is True
        assert created_second is False
        assert first.id == second.id
        assert db_session.query(AppointmentORM).count() == 1

    def test_slot_taken_by_other_pet_is_conflict(self, appointment_service, vet, pet, other_pet):
        appointment_service.create_appointment_idempotent(vet.id, pet.id, TUESDAY, TimeSlot.SLOT_1000_1100)

        with pytest.raises(SlotUnavailableException):
            appointment_service.create_appointment_idempotent(
                vet.id, other_pet.id, TUESDAY, TimeSlot.SLOT_1000_1100
            )

    def test_canceled_match_is_not_reused(self, appointment_service, make_appointment, vet, pet):
        canceled = make_appointment(
            vet, pet, TUESDAY, TimeSlot.SLOT_1000_1100, status=AppointmentStatus.canceled
        )

        appointment, created = appointment_service.create_appointment_idempotent(
            vet.id, pet.id, TUESDAY, TimeSlot.SLOT_1000_1100
        )

        assert created is True
        assert appointment.id != canceled.id


class AlwaysFreeChecker(ConflictChecker):
    """Reports every slot as free, as if a concurrent booking landed after the check."""

    def is_slot_available(self, vet_id, appointment_date, time_slot, exclude_id=None) -> bool:
        return True


class TestUniqueIndexBackstop:
    """Tests for bookings that pass the slot check and then hit the unique index."""

    @pytest.fixture
    def racing_service(self, db_session: Session) -> AppointmentService:
        appointment_repo = AppointmentRepository(db_session)
        return AppointmentService(
            appointment_repo,
            VetRepository(db_session),
            PetRepository(db_session),
            OwnerRepository(db_session),
            AlwaysFreeChecker(appointment_repo),
            clock=lambda: datetime(2030, 1, 7, 8, 0, tzinfo=ZoneInfo("UTC")),
        )

    def test_late_conflict_becomes_slot_unavailable(
        self, racing_service, make_appointment, db_session: Session, vet, pet, other_pet
    ):
        make_appointment(vet, other_pet, TUESDAY, TimeSlot.SLOT_1000_1100)

        with pytest.raises(SlotUnavailableException) as exc_info:
            racing_service.create_appointment(_create_data(vet, pet, time_slot=TimeSlot.SLOT_1000_1100))

        assert exc_info.value.details["error"] == "slot_unavailable"
        assert db_session.query(AppointmentORM).count() == 1

    def test_idempotent_create_returns_winner_of_race(
        self, racing_service, make_appointment, monkeypatch, vet, pet
    ):
        """The first lookup misses, the insert loses, the second lookup finds the winner."""
        winner = make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_1000_1100)
        repository = racing_service.repository
        lookup = repository.find_active_exact
        calls = []

        def miss_first(*args):
            calls.append(args)
            return None if len(calls) == 1 else lookup(*args)

        monkeypatch.setattr(repository, "find_active_exact", miss_first)

        appointment, created = racing_service.create_appointment_idempotent(
            vet.id, pet.id, TUESDAY, TimeSlot.SLOT_1000_1100
        )

        assert created is False
        assert appointment.id == winner.id
        assert len(calls) == 2

    def test_idempotent_create_lost_to_other_pet_raises(
        self, racing_service, make_appointment, vet, pet, other_pet
    ):
        make_appointment(vet, other_pet, TUESDAY, TimeSlot.SLOT_1000_1100)

        with pytest.raises(SlotUnavailableException):
            racing_service.create_appointment_idempotent(vet.id, pet.id, TUESDAY, TimeSlot.SLOT_1000_1100)


class TestUpdateAppointment:
    """Tests for update_appointment."""

    def test_update_notes_bumps_version(self, appointment_service, make_appointment, vet, pet):
        appointment = make_appointment(vet, pet, TUESDAY)

        updated = appointment_service.update_appointment(
            appointment.id, _update_data(appointment, notes="Trae la cartilla")
        )

        assert updated.notes == "Trae la cartilla"
        assert updated.version == 2

    def test_update_keeping_own_slot_succeeds(self, appointment_service, make_appointment, vet, pet):
        appointment = make_appointment(vet, pet, TUESDAY)

        updated = appointment_service.update_appointment(
            appointment.id, _update_data(appointment, status=AppointmentStatus.confirmed)
        )

        assert updated.status == AppointmentStatus.confirmed
        assert updated.time_slot == TimeSlot.SLOT_0900_1000

    def test_update_to_occupied_slot_rejected(self, appointment_service, make_appointment, vet, pet, other_pet):
        make_appointment(vet, other_pet, TUESDAY, TimeSlot.SLOT_1100_1200)
        appointment = make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_0900_1000)

        with pytest.raises(SlotUnavailableException):
            appointment_service.update_appointment(
                appointment.id, _update_data(appointment, time_slot=TimeSlot.SLOT_1100_1200)
            )

    def test_update_with_stale_version_rejected(self, appointment_service, make_appointment, vet, pet):
        appointment = make_appointment(vet, pet, TUESDAY)
        appointment_service.update_appointment(appointment.id, _update_data(appointment, notes="primera"))

        with pytest.raises(StaleWriteException) as exc_info:
            appointment_service.update_appointment(
                appointment.id, _update_data(appointment, notes="segunda", version=1)
            )

        assert exc_info.value.details["error"] == "stale_write"

    def test_update_to_past_date_rejected(self, appointment_service, make_appointment, vet, pet):
        appointment = make_appointment(vet, pet, TUESDAY)

        with pytest.raises(ValidationException) as exc_info:
            appointment_service.update_appointment(
                appointment.id, _update_data(appointment, appointment_date=MONDAY - timedelta(days=3))
            )

        assert exc_info.value.details["field"] == "appointment_date"

    def test_update_past_appointment_without_moving_it(self, appointment_service, make_appointment, vet, pet):
        """Completing an appointment from last week does not trip the past-date rule."""
        appointment = make_appointment(
            vet, pet, MONDAY - timedelta(days=7), status=AppointmentStatus.confirmed
        )

        updated = appointment_service.update_appointment(
            appointment.id, _update_data(appointment, status=AppointmentStatus.completed)
        )

        assert updated.status == AppointmentStatus.completed

    @pytest.mark.parametrize("terminal", [AppointmentStatus.completed, AppointmentStatus.canceled])
    def test_terminal_status_cannot_change(self, appointment_service, make_appointment, vet, pet, terminal):
        appointment = make_appointment(vet, pet, TUESDAY, status=terminal)

        with pytest.raises(BusinessException):
            appointment_service.update_appointment(
                appointment.id, _update_data(appointment, status=AppointmentStatus.confirmed)
            )

    def test_pending_cannot_jump_to_completed(self, appointment_service, make_appointment, vet, pet):
        appointment = make_appointment(vet, pet, TUESDAY)

        with pytest.raises(BusinessException):
            appointment_service.update_appointment(
                appointment.id, _update_data(appointment, status=AppointmentStatus.completed)
            )

    def test_update_requires_status(self, appointment_service, make_appointment, vet, pet):
        """An update without status is a missing field even on a confirmed appointment."""
        appointment = make_appointment(vet, pet, TUESDAY, status=AppointmentStatus.confirmed)
        data = AppointmentUpdate(
            vet_id=vet.id, pet_id=pet.id, appointment_date=TUESDAY,
            time_slot=TimeSlot.SLOT_0900_1000, version=appointment.version
        )

        with pytest.raises(ValidationException) as exc_info:
            appointment_service.update_appointment(appointment.id, data)

        assert exc_info.value.details["field"] == "status"

    def test_update_missing_appointment(self, appointment_service, vet, pet):
        data = AppointmentUpdate(
            vet_id=vet.id, pet_id=pet.id, appointment_date=TUESDAY,
            time_slot=TimeSlot.SLOT_0900_1000, version=1
        )

        with pytest.raises(NotFoundException):
            appointment_service.update_appointment(9999, data)


class TestCancelAndDelete:
    """Tests for cancel_appointment and delete_appointment."""

    def test_cancel_keeps_row(self, appointment_service, make_appointment, db_session: Session, vet, pet):
        appointment = make_appointment(vet, pet, TUESDAY)

        canceled = appointment_service.cancel_appointment(appointment.id)

        assert canceled.status == AppointmentStatus.canceled
        assert db_session.get(AppointmentORM, appointment.id) is not None

    def test_cancel_completed_rejected(self, appointment_service, make_appointment, vet, pet):
        appointment = make_appointment(vet, pet, TUESDAY, status=AppointmentStatus.completed)

        with pytest.raises(BusinessException):
            appointment_service.cancel_appointment(appointment.id)

    def test_delete_removes_row(self, appointment_service, make_appointment, db_session: Session, vet, pet):
        appointment = make_appointment(vet, pet, TUESDAY)
        appointment_id = appointment.id

        appointment_service.delete_appointment(appointment_id)

        assert db_session.get(AppointmentORM, appointment_id) is None

    def test_delete_missing_appointment(self, appointment_service):
        with pytest.raises(NotFoundException):
            appointment_service.delete_appointment(9999)


class TestBatchOperations:
    """Tests for batch_confirm and batch_cancel."""

    def test_batch_confirm_counts_only_pending(self, appointment_service, make_appointment, vet, pet):
        pending = make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_0900_1000)
        confirmed = make_appointment(
            vet, pet, TUESDAY, TimeSlot.SLOT_1000_1100, status=AppointmentStatus.confirmed
        )

        count = appointment_service.batch_confirm([pending.id, confirmed.id, 9999])

        assert count == 1
        assert appointment_service.get_appointment(pending.id).status == AppointmentStatus.confirmed
        assert appointment_service.get_appointment(confirmed.id).version == confirmed.version

    def test_batch_confirm_ignores_duplicate_ids(self, appointment_service, make_appointment, vet, pet):
        pending = make_appointment(vet, pet, TUESDAY)

        assert appointment_service.batch_confirm([pending.id, pending.id]) == 1

    def test_batch_cancel_skips_terminal(self, appointment_service, make_appointment, vet, pet):
        pending = make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_0900_1000)
        confirmed = make_appointment(
            vet, pet, TUESDAY, TimeSlot.SLOT_1000_1100, status=AppointmentStatus.confirmed
        )
        completed = make_appointment(
            vet, pet, TUESDAY, TimeSlot.SLOT_1100_1200, status=AppointmentStatus.completed
        )

        count = appointment_service.batch_cancel([pending.id, confirmed.id, completed.id])

        assert count == 2
        assert appointment_service.get_appointment(completed.id).status == AppointmentStatus.completed

    def test_batch_with_empty_list(self, appointment_service):
        assert appointment_service.batch_confirm([]) == 0
        assert appointment_service.batch_cancel([]) == 0


class TestAppointmentQueries:
    """Tests for listing, available slots, stats and schedule."""

    def test_available_slots_exclude_active_bookings(self, appointment_service, make_appointment, vet, pet):
        make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_0900_1000)
        make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_1400_1500, status=AppointmentStatus.confirmed)
        make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_1000_1100, status=AppointmentStatus.canceled)

        slots = appointment_service.get_available_time_slots(vet.id, TUESDAY)

        assert slots == [
            TimeSlot.SLOT_1000_1100,
            TimeSlot.SLOT_1100_1200,
            TimeSlot.SLOT_1500_1600,
            TimeSlot.SLOT_1600_1700,
        ]

    def test_available_slots_unknown_vet(self, appointment_service):
        with pytest.raises(NotFoundException):
            appointment_service.get_available_time_slots(9999, TUESDAY)

    def test_weekly_stats(self, appointment_service, make_appointment, vet, pet):
        """10 appointments in the week, 4 completed and 2 canceled leave 4 pending."""
        slots = TimeSlot.ordered()
        statuses = (
            [AppointmentStatus.completed] * 4
            + [AppointmentStatus.canceled] * 2
            + [AppointmentStatus.pending_confirmation] * 2
            + [AppointmentStatus.confirmed] * 2
        )
        for i, status in enumerate(statuses):
            make_appointment(vet, pet, MONDAY + timedelta(days=i // len(slots)), slots[i % len(slots)], status=status)
        # next week does not count
        make_appointment(vet, pet, MONDAY + timedelta(days=7))

        stats = appointment_service.get_appointment_stats(vet.id, MONDAY, MONDAY + timedelta(days=6))

        assert stats.total == 10
        assert stats.completed == 4
        assert stats.cancelled == 2
        assert stats.pending == 4

    def test_stats_with_inverted_range_rejected(self, appointment_service, vet):
        with pytest.raises(ValidationException):
            appointment_service.get_appointment_stats(vet.id, TUESDAY, MONDAY)

    def test_lists_are_chronological(self, appointment_service, make_appointment, vet, pet):
        late = make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_1600_1700)
        early = make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_0900_1000)
        middle = make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_1100_1200)

        ids = [a.id for a in appointment_service.list_by_vet_and_date(vet.id, TUESDAY)]

        assert ids == [early.id, middle.id, late.id]

    def test_list_by_owner(self, appointment_service, make_appointment, vet, pet, other_pet, owner):
        mine = make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_0900_1000)
        make_appointment(vet, other_pet, TUESDAY, TimeSlot.SLOT_1000_1100)

        result = appointment_service.list_by_owner(owner.id)

        assert [a.id for a in result] == [mine.id]

    def test_list_by_unknown_owner(self, appointment_service):
        with pytest.raises(NotFoundException):
            appointment_service.list_by_owner(9999)

    def test_upcoming_for_vet_skips_past_and_canceled(self, appointment_service, make_appointment, vet, pet):
        make_appointment(vet, pet, MONDAY - timedelta(days=1))
        make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_1000_1100, status=AppointmentStatus.canceled)
        upcoming = make_appointment(vet, pet, TUESDAY, TimeSlot.SLOT_0900_1000)

        result = appointment_service.list_upcoming_for_vet(vet.id)

        assert [a.id for a in result] == [upcoming.id]

    def test_vet_schedule_covers_monday_to_sunday(self, appointment_service, make_appointment, vet, pet):
        wednesday = MONDAY + timedelta(days=2)
        inside = make_appointment(vet, pet, MONDAY + timedelta(days=6))
        make_appointment(vet, pet, MONDAY + timedelta(days=7))

        schedule = appointment_service.get_vet_schedule(vet.id, wednesday)

        assert schedule.week_start == MONDAY
        assert schedule.week_end == MONDAY + timedelta(days=6)
        assert schedule.previous_week_date == wednesday - timedelta(days=7)
        assert schedule.next_week_date == wednesday + timedelta(days=7)
        assert [a.id for a in schedule.appointments] == [inside.id]
        assert schedule.stats.total == 1
        assert schedule.vet_name == "James Carter"

    def test_vet_schedule_defaults_to_current_week(self, appointment_service, vet):
        schedule = appointment_service.get_vet_schedule(vet.id)

        assert schedule.current_date == MONDAY
        assert schedule.week_start == MONDAY
