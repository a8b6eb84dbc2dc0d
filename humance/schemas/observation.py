from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class ObservationForUserRequest(BaseModel):
    employee_id: int
    text: str = Field(..., min_length=1)


class DiaryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    employee_id: int
    employee_name: str
    author_id: Optional[int] = None
    author_name: str
    created_at: datetime
    review_id: Optional[int] = None
