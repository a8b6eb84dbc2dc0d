from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from humance.schemas.department import ManagerResponse


class EvaluationItem(BaseModel):
    text: str = Field(..., min_length=3)
    description: Optional[str] = None


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=3)
    items: List[EvaluationItem] = Field(..., min_length=1)


class TemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    items: List[EvaluationItem]
    created_at: Optional[datetime] = None
    assigned_managers: List[ManagerResponse] = []


class TemplateAssignmentRequest(BaseModel):
    template_id: int
    manager_ids: List[int] = Field(..., min_length=1)
