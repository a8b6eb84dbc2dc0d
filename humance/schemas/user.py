from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import date
from humance.models.user import UserRole


class UserBase(BaseModel):
    name: str = Field(..., min_length=3)
    email: EmailStr
    role: UserRole
    birth_date: date
    department_id: Optional[int] = None


class UserCreate(UserBase):
    password: Optional[str] = None


class UserUpdate(UserBase):
    """Password is only changed when a new one is given."""
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_length(cls, value: Optional[str]) -> Optional[str]:
        if value and len(value) < 6:
            raise ValueError("A senha deve ter pelo menos 6 caracteres.")
        return value or None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    birth_date: Optional[date] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None
