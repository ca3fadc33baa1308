"""
Servicio para el registro de Visitas de mascotas.
"""

from typing import Callable, List
from datetime import datetime
import logging

from services.base_service import BaseService
from repositories.visit_repository import VisitRepository
from repositories.pet_repository import PetRepository
from database.models import VisitORM
from models.visits import Visit, VisitCreate, VisitUpdate
from core.exceptions import NotFoundException
from utils.datetime_utils import get_local_now

logger = logging.getLogger(__name__)


class VisitService(BaseService[VisitORM, VisitRepository]):
    """Servicio para el registro de Visitas."""

    def __init__(
        self,
        visit_repository: VisitRepository,
        pet_repository: PetRepository,
        clock: Callable[[], datetime] = get_local_now
    ):
        super().__init__(visit_repository)
        self.pet_repo = pet_repository
        self.clock = clock

    def create_visit(self, pet_id: int, data: VisitCreate) -> Visit:
        """
        Registra una visita para una mascota.

        Si no se indica fecha se usa la de hoy en la zona de la clínica.

        Raises:
            NotFoundException: si la mascota no existe
        """
        self.pet_repo.get_by_id_or_fail(pet_id)

        visit = VisitORM(
            pet_id=pet_id,
            visit_date=data.visit_date or self.clock().date(),
            description=data.description,
            vaccination_status=data.vaccination_status,
            vaccination_date=data.vaccination_date,
        )
        created = self.repository.create(visit)
        self.repository.commit()

        logger.info(f"Visit {created.id} created for pet {pet_id}")

        return self._to_response_model(created)

    def list_visits(self, pet_id: int) -> List[Visit]:
        self.pet_repo.get_by_id_or_fail(pet_id)
        return [self._to_response_model(v) for v in self.repository.find_by_pet(pet_id)]

    def update_visit(self, pet_id: int, visit_id: int, data: VisitUpdate) -> Visit:
        visit = self._get_pet_visit(pet_id, visit_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if field in ("visit_date", "description") and value is None:
                continue
            setattr(visit, field, value)

        updated = self.repository.update(visit)
        self.repository.commit()

        logger.info(f"Visit {visit_id} updated")

        return self._to_response_model(updated)

    def delete_visit(self, pet_id: int, visit_id: int) -> None:
        """
        Elimina una visita de la mascota.

        Raises:
            NotFoundException: si la visita no existe o pertenece a otra mascota
        """
        visit = self._get_pet_visit(pet_id, visit_id)
        self.repository.delete(visit)
        self.repository.commit()

        logger.info(f"Visit {visit_id} of pet {pet_id} deleted")

    def _get_pet_visit(self, pet_id: int, visit_id: int) -> VisitORM:
        visit = self.repository.get_by_id(visit_id)
        if visit is None or visit.pet_id != pet_id:
            raise NotFoundException(resource="Visita", identifier=str(visit_id))
        return visit

    def _to_response_model(self, visit: VisitORM) -> Visit:
        return Visit(
            id=visit.id,
            pet_id=visit.pet_id,
            visit_date=visit.visit_date,
            description=visit.description,
            vaccination_status=visit.vaccination_status,
            vaccination_date=visit.vaccination_date,
        )
