"""
Servicio para la lógica de negocio de Propietarios y sus Mascotas.
"""

from typing import List, Tuple
import logging

from services.base_service import BaseService
from repositories.owner_repository import OwnerRepository
from repositories.pet_repository import PetRepository
from database.models import OwnerORM, PetORM
from models.owners import Owner, OwnerCreate, OwnerUpdate, Pet, PetCreate, PetUpdate, PetType
from core.exceptions import NotFoundException, ValidationException
from core.pagination import calculate_skip

logger = logging.getLogger(__name__)


class OwnerService(BaseService[OwnerORM, OwnerRepository]):
    """Servicio para la lógica de negocio de Propietarios."""

    def __init__(self, owner_repository: OwnerRepository, pet_repository: PetRepository):
        """
        Inicializa el servicio de propietarios.

        Args:
            owner_repository: OwnerRepository instance
            pet_repository: PetRepository instance
        """
        super().__init__(owner_repository)
        self.pet_repo = pet_repository

    def create_owner(self, data: OwnerCreate) -> Owner:
        owner = OwnerORM(**data.model_dump())
        created = self.repository.create(owner)
        self.repository.commit()

        logger.info(f"Owner {created.id} created: {created.first_name} {created.last_name}")

        return self._to_response_model(created)

    def get_owner(self, owner_id: int) -> Owner:
        return self._to_response_model(self.repository.get_by_id_or_fail(owner_id))

    def update_owner(self, owner_id: int, data: OwnerUpdate) -> Owner:
        """
        Actualiza los campos enviados de un propietario.

        Raises:
            NotFoundException: si el propietario no existe
        """
        owner = self.repository.get_by_id_or_fail(owner_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(owner, field, value)

        updated = self.repository.update(owner)
        self.repository.commit()

        logger.info(f"Owner {owner_id} updated")

        return self._to_response_model(updated)

    def search_by_last_name(self, last_name: str, page: int = 0, page_size: int = 5) -> Tuple[List[Owner], int]:
        """
        Busca propietarios por prefijo de apellido.

        Returns:
            Tuple of (propietarios de la página, total)
        """
        owners, total = self.repository.find_by_last_name(
            last_name.strip(),
            skip=calculate_skip(page, page_size),
            limit=page_size
        )
        return [self._to_response_model(o) for o in owners], total

    # ==================== Mascotas ====================

    def add_pet(self, owner_id: int, data: PetCreate) -> Pet:
        """
        Registra una mascota para un propietario.

        Raises:
            NotFoundException: si el propietario no existe
            ValidationException: si el tipo de mascota no existe o hay un nombre repetido
        """
        self.repository.get_by_id_or_fail(owner_id)
        pet_type = self._validate_type(data.type_id)
        self._validate_unique_name(owner_id, data.name)

        pet = PetORM(owner_id=owner_id, **data.model_dump())
        created = self.pet_repo.create(pet)
        self.pet_repo.commit()

        logger.info(f"Pet {created.id} ({created.name}) added to owner {owner_id}")

        return self._pet_to_response_model(created, pet_type.name)

    def get_pet(self, owner_id: int, pet_id: int) -> Pet:
        pet = self._get_owned_pet(owner_id, pet_id)
        return self._pet_to_response_model(pet)

    def update_pet(self, owner_id: int, pet_id: int, data: PetUpdate) -> Pet:
        pet = self._get_owned_pet(owner_id, pet_id)
        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("type_id") is not None:
            self._validate_type(update_data["type_id"])
        if update_data.get("name") and update_data["name"] != pet.name:
            self._validate_unique_name(owner_id, update_data["name"])

        for field, value in update_data.items():
            if value is not None or field == "birth_date":
                setattr(pet, field, value)

        updated = self.pet_repo.update(pet)
        self.pet_repo.commit()

        logger.info(f"Pet {pet_id} updated")

        return self._pet_to_response_model(updated)

    def list_pets(self, owner_id: int) -> List[Pet]:
        self.repository.get_by_id_or_fail(owner_id)
        return [self._pet_to_response_model(p) for p in self.pet_repo.find_by_owner(owner_id)]

    def list_pet_types(self) -> List[PetType]:
        return [PetType(id=t.id, name=t.name) for t in self.pet_repo.get_types()]

    # ==================== Helpers ====================

    def _get_owned_pet(self, owner_id: int, pet_id: int) -> PetORM:
        self.repository.get_by_id_or_fail(owner_id)
        pet = self.pet_repo.get_by_id(pet_id)
        if pet is None or pet.owner_id != owner_id:
            raise NotFoundException(resource="Mascota", identifier=str(pet_id))
        return pet

    def _validate_type(self, type_id: int):
        pet_type = self.pet_repo.get_type(type_id)
        if pet_type is None:
            raise ValidationException(message=f"Tipo de mascota {type_id} no existe", field="type_id")
        return pet_type

    def _validate_unique_name(self, owner_id: int, name: str) -> None:
        if any(p.name.lower() == name.lower() for p in self.pet_repo.find_by_owner(owner_id)):
            raise ValidationException(message=f"El propietario ya tiene una mascota llamada '{name}'", field="name")

    def _to_response_model(self, owner: OwnerORM) -> Owner:
        return Owner(
            id=owner.id,
            first_name=owner.first_name,
            last_name=owner.last_name,
            address=owner.address,
            city=owner.city,
            telephone=owner.telephone,
            email=owner.email,
            pet_count=self.repository.count_pets(owner.id),
        )

    def _pet_to_response_model(self, pet: PetORM, type_name: str = None) -> Pet:
        if type_name is None:
            pet_type = self.pet_repo.get_type(pet.type_id)
            type_name = pet_type.name if pet_type else None
        return Pet(
            id=pet.id,
            name=pet.name,
            birth_date=pet.birth_date,
            type_id=pet.type_id,
            owner_id=pet.owner_id,
            type_name=type_name,
        )
