from pydantic import BaseModel, Field, ConfigDict
from typing import Optional


class DepartmentBase(BaseModel):
    """Base schema for department data."""
    name: str = Field(..., min_length=1, max_length=100)
    leader_id: int


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentUpdate(DepartmentBase):
    pass


class DepartmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    leader_id: Optional[int] = None
    leader_name: Optional[str] = None


class ManagerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
