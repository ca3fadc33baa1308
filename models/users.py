from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    vet = "vet"
    receptionist = "receptionist"


class UserCreate(BaseModel):
    """Alta de una cuenta de personal (solo administradores)."""
    username: str = Field(..., min_length=1, max_length=100)
    full_name: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=6)
    role: Role = Role.receptionist


class User(BaseModel):
    id: int
    username: str
    full_name: str
    role: Role
    created_at: Optional[datetime] = None
