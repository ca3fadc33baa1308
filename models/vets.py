from pydantic import BaseModel, Field
from typing import List


class VetCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=30)
    last_name: str = Field(..., min_length=1, max_length=30)
    specialties: List[str] = Field(default_factory=list)


class Vet(BaseModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    specialties: List[str] = Field(default_factory=list)
