from pydantic import BaseModel, Field
from typing import Optional
from datetime import date


class OwnerBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=30)
    last_name: str = Field(..., min_length=1, max_length=30)
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=80)
    telephone: str = Field(..., pattern=r"^\d{7,15}$")
    email: Optional[str] = Field(None, max_length=120)


class OwnerCreate(OwnerBase):
    pass


class OwnerUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=30)
    last_name: Optional[str] = Field(None, min_length=1, max_length=30)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=80)
    telephone: Optional[str] = Field(None, pattern=r"^\d{7,15}$")
    email: Optional[str] = Field(None, max_length=120)


class Owner(OwnerBase):
    id: int
    pet_count: int = 0


class PetType(BaseModel):
    id: int
    name: str


class PetBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=30)
    birth_date: Optional[date] = None
    type_id: int


class PetCreate(PetBase):
    """El propietario se toma de la ruta, no del cuerpo."""
    pass


class PetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=30)
    birth_date: Optional[date] = None
    type_id: Optional[int] = None


class Pet(PetBase):
    id: int
    owner_id: int
    type_name: Optional[str] = None
