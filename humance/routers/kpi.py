from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from humance.core.schemas import ActionResponse
from humance.database import get_db
from humance.routers.auth_deps import require_admin
from humance.schemas.auth import AuthContext
from humance.schemas.kpi import (
    KpiAssessmentResponse,
    KpiModelResponse,
    KpiModelUpsert,
    KpiProcessRequest,
    KpiProcessResult,
)
from humance.services import kpi_service

router = APIRouter(prefix="/kpi", tags=["kpi"])


@router.get("/models", response_model=List[KpiModelResponse])
def list_kpi_models(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return kpi_service.list_kpi_models(db)


@router.get("/models/{department_id}", response_model=KpiModelResponse)
def get_kpi_model(
    department_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return kpi_service.kpi_model_details(db, department_id)


@router.put("/models", response_model=ActionResponse[KpiModelResponse])
def upsert_kpi_model(
    data: KpiModelUpsert,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    model = kpi_service.upsert_kpi_model(db, data)
    return ActionResponse.ok("Modelo de KPI salvo com sucesso.", KpiModelResponse.model_validate(model))


@router.post("/process", response_model=KpiProcessResult)
def process_kpi_results(
    request: KpiProcessRequest,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return kpi_service.process_kpi_results(
        db, actor, request.department_id, request.period, request.results
    )


@router.get("/assessments", response_model=List[KpiAssessmentResponse])
def list_assessments(
    period: Optional[str] = Query(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$"),
    department_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return kpi_service.list_assessments(db, period=period, department_id=department_id)


@router.delete("/assessments/{assessment_id}", response_model=ActionResponse)
def delete_assessment(
    assessment_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    cleared = kpi_service.delete_assessment(db, actor, assessment_id)
    return ActionResponse.ok(
        "Apuração excluída. O KPI foi removido das avaliações do período.",
        {"reviews_affected_count": cleared},
    )
