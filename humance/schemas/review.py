from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import datetime
from humance.schemas.common import Period, ItemScore
from humance.schemas.template import EvaluationItem


class ReviewCreateRequest(BaseModel):
    template_id: int
    employee_ids: List[int] = Field(..., min_length=1)
    period: Optional[Period] = None


class ReviewCreateResult(BaseModel):
    created_count: int
    skipped_count: int


class ReviewSubmission(BaseModel):
    # Keys are template item positions ("0", "1", ...)
    scores: Dict[str, ItemScore]
    manager_observations: Optional[str] = None
    feedback_for_employee: str = Field(
        ..., min_length=20,
        description="O feedback para o colaborador deve ter pelo menos 20 caracteres."
    )


class ReviewAdjustmentRequest(BaseModel):
    feedback: str = Field(..., min_length=10)


class ReviewSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    employee_name: str
    employee_role: Optional[str] = None
    manager_id: Optional[int] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    period: str
    status: str
    average_score: Optional[float] = None
    kpi_score: Optional[float] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class WeeklyObservationCreate(BaseModel):
    text: str = Field(..., min_length=1)


class WeeklyObservationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    created_at: datetime


class ReviewDetail(ReviewSummary):
    template_id: Optional[int] = None
    template_name: Optional[str] = None
    template_items: List[EvaluationItem] = []
    scores: Optional[Dict[str, float]] = None
    manager_observations: Optional[str] = None
    feedback_for_employee: Optional[str] = None
    admin_feedback_for_manager: Optional[str] = None
    weekly_observations: List[WeeklyObservationResponse] = []
    previous_average_score: Optional[float] = None
    previous_scores: Optional[Dict[str, float]] = None


class FeedbackSuggestionRequest(BaseModel):
    """Draft scores from the form; falls back to the stored ones when omitted."""
    scores: Optional[Dict[str, ItemScore]] = None
    manager_observations: Optional[str] = None


class FeedbackSuggestion(BaseModel):
    feedback: str
