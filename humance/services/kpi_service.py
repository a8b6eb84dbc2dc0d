"""
KPI models and the monthly apuração.

Processing a department's measured results scores them against the
department's KPI model, stamps the score on every review of that department
and period, completes the reviews waiting for approval and keeps a snapshot
of the whole run. The snapshot and the review updates share one commit.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from humance.core.exceptions import NotFoundError, ValidationFailedError
from humance.models.department import Department
from humance.models.kpi import KpiAssessment, KpiModel
from humance.models.performance_review import PerformanceReview, ReviewStatus
from humance.schemas.auth import AuthContext
from humance.schemas.kpi import KpiModelUpsert
from humance.services.audit import AuditService
from humance.services.base import commit_or_fail
from humance.services.org_service import get_department
from humance.services.review_lifecycle import ReviewAction
from humance.services.review_service import complete_review
from humance.services.scoring import Indicator, calculate_kpi_score

logger = logging.getLogger(__name__)


def _model_to_dict(model: KpiModel) -> dict:
    return {
        "id": model.id,
        "department_id": model.department_id,
        "department_name": model.department.name if model.department else "N/A",
        "indicators": model.indicators or [],
    }


# --- KPI models ---

def list_kpi_models(db: Session) -> List[dict]:
    models = (
        db.query(KpiModel)
        .join(Department, Department.id == KpiModel.department_id)
        .order_by(Department.name)
        .all()
    )
    return [_model_to_dict(m) for m in models]


def get_kpi_model_for_department(db: Session, department_id: int) -> Optional[KpiModel]:
    return db.query(KpiModel).filter(KpiModel.department_id == department_id).first()


def kpi_model_details(db: Session, department_id: int) -> dict:
    model = get_kpi_model_for_department(db, department_id)
    if not model:
        raise NotFoundError("Modelo de KPI não encontrado para o setor selecionado.")
    return _model_to_dict(model)


def upsert_kpi_model(db: Session, data: KpiModelUpsert) -> dict:
    department = get_department(db, data.department_id)
    indicators = [i.model_dump(mode="json") for i in data.indicators]

    model = get_kpi_model_for_department(db, department.id)
    if model:
        model.indicators = indicators
    else:
        model = KpiModel(department_id=department.id, indicators=indicators)
        db.add(model)

    commit_or_fail(db, "Erro ao salvar modelo de KPI.")
    db.refresh(model)
    logger.info(f"KPI model saved for department {department.id}", extra={"indicators": len(indicators)})
    return _model_to_dict(model)


# --- Apuração ---

def process_kpi_results(
    db: Session,
    actor: AuthContext,
    department_id: int,
    period: str,
    results: Dict[int, Optional[float]],
) -> dict:
    department = get_department(db, department_id)
    model = get_kpi_model_for_department(db, department.id)
    if not model or not model.indicators:
        raise ValidationFailedError("Modelo de KPI não encontrado para o setor selecionado.")

    indicators = [Indicator.from_dict(raw) for raw in model.indicators]
    kpi_score = calculate_kpi_score(indicators, results)

    reviews = (
        db.query(PerformanceReview)
        .filter(PerformanceReview.department_id == department.id, PerformanceReview.period == period)
        .all()
    )
    if not reviews:
        logger.info(f"KPI processed for {department.name} {period} with no reviews to update")
        return {
            "success": True,
            "message": "Nenhuma avaliação encontrada para este setor e período. Nenhum dado foi atualizado.",
            "kpi_score": kpi_score,
            "reviews_affected_count": 0,
        }

    completed = 0
    for review in reviews:
        review.kpi_score = kpi_score
        if review.status == ReviewStatus.AWAITING_APPROVAL.value:
            complete_review(db, actor, review, ReviewAction.KPI_COMPLETION)
            completed += 1

    assessment = (
        db.query(KpiAssessment)
        .filter(KpiAssessment.department_id == department.id, KpiAssessment.period == period)
        .first()
    )
    if assessment is None:
        assessment = KpiAssessment(department_id=department.id, period=period)
        db.add(assessment)
    assessment.department_name = department.name
    assessment.kpi_score = kpi_score
    # JSON object keys are strings; keep them that way explicitly
    assessment.results = {str(index): value for index, value in results.items()}
    assessment.indicators = list(model.indicators)
    assessment.assessed_at = datetime.now(timezone.utc)

    AuditService.log(
        db, actor,
        action="kpi_processed",
        entity_type="department",
        entity_id=department.id,
        details={"period": period, "kpi_score": kpi_score, "reviews": len(reviews), "completed": completed},
    )
    commit_or_fail(db, "Erro ao processar e salvar resultados de KPI.")

    logger.info(
        f"KPI processed for {department.name} {period}",
        extra={"kpi_score": kpi_score, "reviews": len(reviews), "completed": completed},
    )
    return {
        "success": True,
        "message": f"Resultados de KPI processados. {len(reviews)} avaliação(ões) atualizada(s).",
        "kpi_score": kpi_score,
        "reviews_affected_count": len(reviews),
    }


def list_assessments(db: Session, period: Optional[str] = None, department_id: Optional[int] = None) -> List[KpiAssessment]:
    query = db.query(KpiAssessment)
    if period:
        query = query.filter(KpiAssessment.period == period)
    if department_id is not None:
        query = query.filter(KpiAssessment.department_id == department_id)
    return query.order_by(KpiAssessment.assessed_at.desc(), KpiAssessment.id.desc()).all()


def delete_assessment(db: Session, actor: AuthContext, assessment_id: int):
    """
    Clears kpi_score on the matching reviews and drops the snapshot.
    Reviews completed by the apuração stay Concluída.
    """
    assessment = db.get(KpiAssessment, assessment_id)
    if not assessment:
        raise NotFoundError("Apuração de KPI não encontrada.")

    affected = (
        db.query(PerformanceReview)
        .filter(
            PerformanceReview.department_id == assessment.department_id,
            PerformanceReview.period == assessment.period,
        )
        .update({PerformanceReview.kpi_score: None}, synchronize_session="fetch")
    )

    AuditService.log(
        db, actor,
        action="kpi_assessment_deleted",
        entity_type="kpi_assessment",
        entity_id=assessment.id,
        details={"department_id": assessment.department_id, "period": assessment.period, "reviews": affected},
        before_state={"kpi_score": assessment.kpi_score},
    )
    db.delete(assessment)
    commit_or_fail(db, "Erro ao excluir apuração de KPI.")
    logger.info(f"KPI assessment {assessment_id} deleted, {affected} review(s) cleared")
    return affected
