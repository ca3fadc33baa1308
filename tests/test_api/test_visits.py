"""
Tests for Visit API endpoints (/pets/{pet_id}/visits).
"""

from datetime import date
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict

from database.models import VisitORM


def _visit(db_session: Session, pet_id: int, visit_date: date, description: str) -> VisitORM:
    visit = VisitORM(pet_id=pet_id, visit_date=visit_date, description=description)
    db_session.add(visit)
    db_session.commit()
    db_session.refresh(visit)
    return visit


class TestVisitEndpoints:

    def test_create_visit_defaults_to_today(self, client: TestClient, auth_headers: Dict[str, str], pet, today):
        response = client.post(f"/pets/{pet.id}/visits/", json={"description": "Rabies shot"}, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["pet_id"] == pet.id
        assert data["visit_date"] == today.isoformat()

    def test_create_visit_with_vaccination(self, client: TestClient, auth_headers: Dict[str, str], pet):
        response = client.post(
            f"/pets/{pet.id}/visits/",
            json={
                "description": "Vacuna anual",
                "visit_date": "2029-03-04",
                "vaccination_status": "fully_vaccinated",
                "vaccination_date": "2029-03-04",
            },
            headers=auth_headers
        )

        assert response.status_code == 201
        assert response.json()["vaccination_status"] == "fully_vaccinated"

    def test_create_visit_for_missing_pet(self, client: TestClient, auth_headers: Dict[str, str]):
        response = client.post("/pets/9999/visits/", json={"description": "Control"}, headers=auth_headers)

        assert response.status_code == 404

    def test_create_visit_requires_auth(self, client: TestClient, pet):
        response = client.post(f"/pets/{pet.id}/visits/", json={"description": "Control"})

        assert response.status_code == 401

    def test_list_most_recent_first(self, client: TestClient, db_session: Session, pet):
        _visit(db_session, pet.id, date(2029, 1, 1), "Primera")
        _visit(db_session, pet.id, date(2029, 6, 1), "Segunda")

        response = client.get(f"/pets/{pet.id}/visits/")

        assert [v["description"] for v in response.json()] == ["Segunda", "Primera"]

    def test_update_visit(self, client: TestClient, auth_headers: Dict[str, str], db_session: Session, pet):
        visit = _visit(db_session, pet.id, date(2029, 1, 1), "Control")

        response = client.put(
            f"/pets/{pet.id}/visits/{visit.id}", json={"description": "Control y limpieza"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["description"] == "Control y limpieza"
        assert response.json()["visit_date"] == "2029-01-01"

    def test_delete_visit_of_other_pet_not_found(
        self, client: TestClient, auth_headers: Dict[str, str], db_session: Session, pet, other_pet
    ):
        visit = _visit(db_session, other_pet.id, date(2029, 1, 1), "Control")

        response = client.delete(f"/pets/{pet.id}/visits/{visit.id}", headers=auth_headers)

        assert response.status_code == 404

    def test_delete_visit(self, client: TestClient, auth_headers: Dict[str, str], db_session: Session, pet):
        visit = _visit(db_session, pet.id, date(2029, 1, 1), "Control")
        visit_id = visit.id

        response = client.delete(f"/pets/{pet.id}/visits/{visit_id}", headers=auth_headers)

        assert response.status_code == 200
        assert db_session.get(VisitORM, visit_id) is None
