from typing import List, Optional

from fastapi import APIRouter, Depends, status

from src.common.exceptions import ValidationError
from src.services.auth_service.auth import AuthService
from src.services.auth_service.dependencies import get_auth_service, get_user_service
from src.services.auth_service.service import UserService
from src.shared.models.common import AffectedResponse, ExistsResponse
from src.shared.models.user_dto import (
    CreateUserRequest,
    CreateUserResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LoginResponse,
    RoleDTO,
    UpdateUserRequest,
    UpdateUserStatusRequest,
    UserDTO,
)

router = APIRouter(prefix="/users", tags=["users"])
roles_router = APIRouter(prefix="/roles", tags=["roles"])
auth_router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("", response_model=CreateUserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    service: UserService = Depends(get_user_service),
):
    user = await service.create_user(request)
    return CreateUserResponse(user_id=user.id, user=user)


@router.get("", response_model=List[UserDTO])
async def list_users(service: UserService = Depends(get_user_service)):
    return await service.list_users()


@router.get("/exists", response_model=ExistsResponse)
async def user_field_exists(
    username: Optional[str] = None,
    email: Optional[str] = None,
    service: UserService = Depends(get_user_service),
):
    """Занято ли имя пользователя или email (ровно один параметр)."""
    if bool(username) == bool(email):
        raise ValidationError("Pass exactly one of: username, email")
    if username:
        return ExistsResponse(exists=await service.username_exists(username))
    return ExistsResponse(exists=await service.email_exists(email))


@router.get("/{user_id}", response_model=UserDTO)
async def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    return await service.get_user(user_id)


@router.put("/{user_id}", response_model=AffectedResponse)
async def update_user(
    user_id: int,
    request: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
):
    return AffectedResponse(affected=await service.update_user(user_id, request))


@router.patch("/{user_id}/status", response_model=AffectedResponse)
async def update_user_status(
    user_id: int,
    request: UpdateUserStatusRequest,
    service: UserService = Depends(get_user_service),
):
    return AffectedResponse(affected=await service.update_user_status(user_id, request.status))


@router.get("/{user_id}/exists", response_model=ExistsResponse)
async def user_exists(user_id: int, service: UserService = Depends(get_user_service)):
    return ExistsResponse(exists=await service.user_exists(user_id))


@roles_router.get("", response_model=List[RoleDTO])
async def list_roles(service: UserService = Depends(get_user_service)):
    return await service.list_roles()


@auth_router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return await service.login(request.username, request.password)


@auth_router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service),
):
    return await service.forgot_password(request.username_or_email)
