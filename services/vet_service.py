"""
Servicio para la gestión de Veterinarios.
"""

from typing import List, Tuple
import logging

from services.base_service import BaseService
from repositories.vet_repository import VetRepository
from database.models import VetORM
from models.vets import Vet, VetCreate

logger = logging.getLogger(__name__)


class VetService(BaseService[VetORM, VetRepository]):
    """Servicio para la gestión de Veterinarios."""

    def __init__(self, vet_repository: VetRepository):
        super().__init__(vet_repository)

    def create_vet(self, data: VetCreate) -> Vet:
        """
        Registra un veterinario con sus especialidades.

        Las especialidades que no existen se crean.
        """
        vet = VetORM(first_name=data.first_name, last_name=data.last_name)
        vet.specialties = self.repository.get_or_create_specialties(data.specialties)

        created = self.repository.create(vet)
        self.repository.commit()

        logger.info(f"Vet {created.id} created: {created.full_name}")

        return self._to_response_model(created)

    def get_vet(self, vet_id: int) -> Vet:
        return self._to_response_model(self.repository.get_by_id_or_fail(vet_id))

    def list_vets(self, page: int = 0, page_size: int = 5) -> Tuple[List[Vet], int]:
        vets, total = self.get_all(page=page, page_size=page_size)
        return [self._to_response_model(v) for v in vets], total

    def _to_response_model(self, vet: VetORM) -> Vet:
        return Vet(
            id=vet.id,
            first_name=vet.first_name,
            last_name=vet.last_name,
            full_name=vet.full_name,
            specialties=sorted(s.name for s in vet.specialties),
        )
