from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class RoleDTO(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class UserDTO(BaseModel):
    id: int
    email: str
    username: str
    role_id: int
    role_name: str
    status: int = 1
    created_at: datetime
    updated_at: datetime
    last_access: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserCredentials(BaseModel):
    """Внутренняя модель auth-сервиса: пользователь вместе с хешем пароля."""
    id: int
    email: str
    username: str
    password_hash: str
    role_id: int
    role_name: Optional[str] = None
    status: int
    created_at: datetime
    last_access: Optional[datetime] = None

    class Config:
        from_attributes = True


class CreateUserRequest(BaseModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6)
    role_id: int = Field(ge=1)


class UpdateUserRequest(BaseModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=100)
    role_id: int = Field(ge=1)
    # Без пароля остаётся текущий
    password: Optional[str] = Field(default=None, min_length=6)


class UpdateUserStatusRequest(BaseModel):
    status: int


class CreateUserResponse(BaseModel):
    user_id: int
    user: UserDTO


class CreateUserAndAssignDriverRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    role_id: int = Field(ge=1)
    driver_id: int = Field(ge=1)


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    success: bool
    message: str
    token: Optional[str] = None
    # Unix timestamp (секунды)
    expires_at: Optional[int] = None


class ForgotPasswordRequest(BaseModel):
    username_or_email: str = ""


class ForgotPasswordResponse(BaseModel):
    success: bool
    message: str
