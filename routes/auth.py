from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from auth import create_access_token, require_roles
from dependencies import get_user_service
from models.users import User, UserCreate
from services.user_service import UserService
from core.exceptions import AppException
from routes.errors import handle_service_exception

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Request model for JSON login."""
    username: str
    password: str


class LoginResponse(BaseModel):
    """Response model for login with user data."""
    access_token: str
    token_type: str
    user: User


def _issue_token(user) -> str:
    return create_access_token({"sub": user.id, "username": user.username, "role": user.role})


@router.post("/login", response_model=LoginResponse)
def login_with_json(login_data: LoginRequest, service: UserService = Depends(get_user_service)):
    """
    Login endpoint that accepts JSON and returns the account data.
    """
    user = service.authenticate(login_data.username, login_data.password)
    if user is None:
        raise HTTPException(status_code=400, detail="Usuario o contraseña incorrectos")

    return {
        "access_token": _issue_token(user),
        "token_type": "bearer",
        "user": service.to_response_model(user),
    }


@router.post("/token")
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: UserService = Depends(get_user_service)
):
    """
    OAuth2 compatible token endpoint (form-data).
    Used by Swagger UI and OAuth2 clients.
    """
    user = service.authenticate(form_data.username, form_data.password)
    if user is None:
        raise HTTPException(status_code=400, detail="Usuario o clave incorrectos")
    return {"access_token": _issue_token(user), "token_type": "bearer"}


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(
    data: UserCreate,
    service: UserService = Depends(get_user_service),
    current_user=Depends(require_roles("admin"))
):
    """Create a staff account (admin only)."""
    try:
        return service.create_user(data)
    except AppException as e:
        raise handle_service_exception(e)
