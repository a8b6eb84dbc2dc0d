from pydantic import AnyHttpUrl, BaseModel, TypeAdapter, ValidationError, field_validator
from typing import Optional

_http_url = TypeAdapter(AnyHttpUrl)


class LeaderboardRow(BaseModel):
    leader_id: int
    leader_name: str
    average_score: float
    kpi_score: float
    kpi_bonus: float
    total_reviews: int
    team_size: int


class BonusReportRow(BaseModel):
    review_id: int
    employee_id: int
    employee_name: str
    department_name: Optional[str] = None
    role: Optional[str] = None
    average_score: float
    kpi_score: float
    performance_bonus_percentage: float
    kpi_bonus_value: float


class PerformanceHistoryPoint(BaseModel):
    period: str
    average_score: Optional[float] = None


class ReviewStatusSummary(BaseModel):
    employee_id: int
    employee_name: str
    employee_role: str
    status: str
    average_score: Optional[float] = None
    review_id: Optional[int] = None


class TeamHighlight(BaseModel):
    employee_id: int
    name: str
    role: str
    reason: str


class EmployeeOfTheMonth(BaseModel):
    """Dashboard highlight. Set by HR, or computed from the team for managers."""
    name: str
    role: str
    reason: str
    image_url: str = ""
    employee_id: Optional[int] = None

    @field_validator("name", "role", "reason")
    @classmethod
    def required_text(cls, v: str, info) -> str:
        v = v.strip()
        if not v:
            labels = {"name": "Nome", "role": "Cargo", "reason": "Motivo"}
            raise ValueError(f"{labels[info.field_name]} é obrigatório.")
        return v

    @field_validator("image_url")
    @classmethod
    def image_url_or_blank(cls, v: str) -> str:
        v = (v or "").strip()
        if v:
            try:
                _http_url.validate_python(v)
            except ValidationError:
                raise ValueError("URL da imagem inválida.")
        return v
