from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import datetime
from humance.models.kpi import IndicatorType, IndicatorCondition
from humance.schemas.common import Period


class KpiIndicatorSchema(BaseModel):
    indicator: str = Field(..., min_length=3)
    weight: float = Field(..., gt=0)
    goal: float
    type: IndicatorType
    condition: IndicatorCondition


class KpiModelUpsert(BaseModel):
    department_id: int
    indicators: List[KpiIndicatorSchema] = Field(..., min_length=1)


class KpiModelResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    department_id: int
    department_name: str
    indicators: List[KpiIndicatorSchema]


class KpiProcessRequest(BaseModel):
    department_id: int
    period: Period
    # Measured value per indicator position; missing positions score nothing
    results: Dict[int, Optional[float]]


class KpiProcessResult(BaseModel):
    success: bool
    message: str
    kpi_score: float
    reviews_affected_count: int


class KpiAssessmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    department_id: int
    department_name: str
    period: str
    kpi_score: float
    assessed_at: datetime
    results: Dict[str, Optional[float]]
    indicators: List[KpiIndicatorSchema]
