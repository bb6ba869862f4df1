from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class DriverDTO(BaseModel):
    id: int
    first_name: str
    second_name: Optional[str] = None
    first_surname: str
    second_surname: Optional[str] = None
    full_name: str
    identification: str
    birth_date: date
    available: bool = True
    user_id: int = 0
    machinery_type_id: int
    status: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def has_user(self) -> bool:
        return self.user_id > 0


class CreateDriverRequest(BaseModel):
    first_name: str = Field(default="", max_length=50)
    second_name: Optional[str] = Field(default=None, max_length=50)
    first_surname: str = Field(default="", max_length=50)
    second_surname: Optional[str] = Field(default=None, max_length=50)
    identification: str = Field(default="", max_length=30)
    birth_date: Optional[date] = None
    available: bool = True
    user_id: int = Field(default=0, ge=0)
    machinery_type_id: int = 0


class UpdateDriverRequest(CreateDriverRequest):
    # None: статус не меняется
    status: Optional[bool] = None


class DriverFilter(BaseModel):
    """Фильтр поиска: все поля необязательны."""
    status: Optional[bool] = None
    machinery_type_id: Optional[int] = None
    available: Optional[bool] = None
    birth_date_from: Optional[date] = None
    birth_date_to: Optional[date] = None


class UpdateDriverStatusRequest(BaseModel):
    status: bool


class UpdateDriverAvailabilityRequest(BaseModel):
    available: bool


class AssignUserRequest(BaseModel):
    user_id: int = Field(ge=1)
