"""
Tests for Vet API endpoints, including schedule and slot availability.
"""

from datetime import timedelta
from fastapi.testclient import TestClient
from typing import Dict

from models.appointments import AppointmentStatus, TimeSlot
from utils.datetime_utils import week_bounds


class TestVetCatalog:
    """Tests for creating and listing vets."""

    def test_create_vet_as_admin(self, client: TestClient, auth_headers_admin: Dict[str, str]):
        response = client.post(
            "/vets/",
            json={"first_name": "Linda", "last_name": "Douglas", "specialties": ["surgery", "dentistry"]},
            headers=auth_headers_admin
        )

        assert response.status_code == 201
        data = response.json()
        assert data["full_name"] == "Linda Douglas"
        assert data["specialties"] == ["dentistry", "surgery"]

    def test_create_vet_requires_admin(self, client: TestClient, auth_headers: Dict[str, str]):
        response = client.post(
            "/vets/", json={"first_name": "Rafael", "last_name": "Ortega"}, headers=auth_headers
        )

        assert response.status_code == 403

    def test_list_vets_paginated(self, client: TestClient, vet, other_vet):
        response = client.get("/vets/")

        assert response.status_code == 200
        data = response.json()
        assert [v["last_name"] for v in data["data"]] == ["Carter", "Leary"]
        assert data["data"][1]["specialties"] == ["radiology"]
        assert data["pagination"]["total_items"] == 2

    def test_get_missing_vet(self, client: TestClient):
        assert client.get("/vets/9999").status_code == 404


class TestVetAvailability:
    """Tests for /vets/{vet_id}/available-slots and appointment-stats."""

    def test_available_slots(
        self, client: TestClient, auth_headers: Dict[str, str], make_appointment, vet, pet, tomorrow
    ):
        make_appointment(vet, pet, tomorrow, TimeSlot.SLOT_0900_1000)
        make_appointment(vet, pet, tomorrow, TimeSlot.SLOT_1500_1600, status=AppointmentStatus.confirmed)

        response = client.get(
            f"/vets/{vet.id}/available-slots", params={"date": tomorrow.isoformat()}, headers=auth_headers
        )

        assert response.status_code == 200
        assert [s["label"] for s in response.json()] == [
            "10:00-11:00", "11:00-12:00", "14:00-15:00", "16:00-17:00"
        ]

    def test_available_slots_requires_date(self, client: TestClient, auth_headers: Dict[str, str], vet):
        response = client.get(f"/vets/{vet.id}/available-slots", headers=auth_headers)

        assert response.status_code == 422

    def test_appointment_stats(
        self, client: TestClient, auth_headers: Dict[str, str], make_appointment, vet, pet, tomorrow
    ):
        week_start, week_end = week_bounds(tomorrow)
        make_appointment(vet, pet, week_start, TimeSlot.SLOT_0900_1000, status=AppointmentStatus.completed)
        make_appointment(vet, pet, week_start, TimeSlot.SLOT_1000_1100, status=AppointmentStatus.canceled)
        make_appointment(vet, pet, week_end, TimeSlot.SLOT_0900_1000)

        response = client.get(
            f"/vets/{vet.id}/appointment-stats",
            params={"week_start": week_start.isoformat(), "week_end": week_end.isoformat()},
            headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"total": 3, "completed": 1, "cancelled": 1, "pending": 1}

    def test_appointment_stats_unknown_vet(self, client: TestClient, auth_headers: Dict[str, str]):
        response = client.get("/vets/9999/appointment-stats", headers=auth_headers)

        assert response.status_code == 404


class TestVetSchedule:
    """Tests for /vets/{vet_id}/schedule and /appointments/week."""

    def test_schedule_for_week(
        self, client: TestClient, auth_headers: Dict[str, str], make_appointment, vet, pet, tomorrow
    ):
        week_start, week_end = week_bounds(tomorrow)
        inside = make_appointment(vet, pet, week_end)
        make_appointment(vet, pet, week_end + timedelta(days=1))

        response = client.get(
            f"/vets/{vet.id}/schedule", params={"date": tomorrow.isoformat()}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["week_start"] == week_start.isoformat()
        assert data["week_end"] == week_end.isoformat()
        assert data["next_week_date"] == (tomorrow + timedelta(days=7)).isoformat()
        assert [a["id"] for a in data["appointments"]] == [inside.id]
        assert data["stats"]["total"] == 1

    def test_week_appointments(
        self, client: TestClient, auth_headers: Dict[str, str], make_appointment, vet, pet, tomorrow
    ):
        week_start, _ = week_bounds(tomorrow)
        in_week = make_appointment(vet, pet, week_start)

        response = client.get(
            f"/vets/{vet.id}/appointments/week", params={"date": tomorrow.isoformat()}, headers=auth_headers
        )

        assert [a["id"] for a in response.json()] == [in_week.id]

    def test_schedule_requires_auth(self, client: TestClient, vet):
        assert client.get(f"/vets/{vet.id}/schedule").status_code == 401
