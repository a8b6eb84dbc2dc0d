"""
Performance Review Service Layer

Opening reviews for a team, reading them, and driving them through the
lifecycle in `review_lifecycle`. Every public operation is one unit of work:
the review change, its audit entry and the notification are committed together.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from humance.core.exceptions import (
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationFailedError,
)
from humance.models.notification import NotificationType
from humance.models.performance_review import PerformanceReview, ReviewStatus
from humance.models.review_template import ReviewTemplate
from humance.models.user import User
from humance.schemas.auth import AuthContext
from humance.schemas.review import FeedbackSuggestionRequest, ReviewSubmission
from humance.services import access, feedback_ai
from humance.services.audit import AuditService
from humance.services.base import commit_or_fail
from humance.services.notification import NotificationService
from humance.services.review_lifecycle import ReviewAction, next_status
from humance.services.scoring import calculate_average_score
from humance.services.template_service import get_template

logger = logging.getLogger(__name__)


def current_period() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m")


def _snapshot(review: PerformanceReview) -> dict:
    return {
        "status": review.status,
        "average_score": review.average_score,
        "kpi_score": review.kpi_score,
        "scores": review.scores,
    }


def get_review(db: Session, review_id: int) -> PerformanceReview:
    review = db.get(PerformanceReview, review_id)
    if not review:
        logger.warning(f"Review {review_id} not found")
        raise NotFoundError("Avaliação não encontrada.")
    return review


def find_review(db: Session, employee_id: int, period: str) -> Optional[PerformanceReview]:
    return (
        db.query(PerformanceReview)
        .filter(PerformanceReview.employee_id == employee_id, PerformanceReview.period == period)
        .first()
    )


def new_review(employee: User, manager_id: int, template: ReviewTemplate, period: str) -> PerformanceReview:
    return PerformanceReview(
        employee_id=employee.id,
        employee_name=employee.name,
        employee_role=employee.role.value,
        department_id=employee.department_id,
        department_name=employee.department_name or "N/A",
        manager_id=manager_id,
        template_id=template.id,
        template_name=template.name,
        period=period,
        status=ReviewStatus.PENDING.value,
    )


# --- Listing / reading ---

def list_reviews(
    db: Session,
    actor: AuthContext,
    department_id: Optional[int] = None,
    period: Optional[str] = None,
) -> List[PerformanceReview]:
    query = db.query(PerformanceReview)

    if actor.is_collaborator:
        query = query.filter(PerformanceReview.employee_id == actor.user_id)
    elif actor.is_manager:
        query = query.filter(PerformanceReview.manager_id == actor.user_id)
    elif department_id is not None:
        query = query.filter(PerformanceReview.department_id == department_id)

    if period:
        query = query.filter(PerformanceReview.period == period)

    return query.order_by(PerformanceReview.period.desc(), PerformanceReview.employee_name).all()


def _previous_completed(db: Session, review: PerformanceReview) -> Optional[PerformanceReview]:
    return (
        db.query(PerformanceReview)
        .filter(
            PerformanceReview.employee_id == review.employee_id,
            PerformanceReview.status == ReviewStatus.COMPLETED.value,
            PerformanceReview.period < review.period,
        )
        .order_by(PerformanceReview.period.desc())
        .first()
    )


def get_review_details(db: Session, actor: AuthContext, review_id: int) -> dict:
    review = get_review(db, review_id)
    access.ensure_can_read_review(actor, review)

    if review.template is None or review.employee is None:
        logger.error(
            f"Template or employee missing for review {review_id}",
            extra={"template_id": review.template_id, "employee_id": review.employee_id},
        )
        raise NotFoundError("Modelo ou colaborador desta avaliação não foi encontrado.")

    previous = _previous_completed(db, review)

    return {
        "id": review.id,
        "employee_id": review.employee_id,
        "employee_name": review.employee.name,
        "employee_role": review.employee.role.value,
        "manager_id": review.manager_id,
        "department_id": review.department_id,
        "department_name": review.department_name,
        "period": review.period,
        "status": review.status,
        "average_score": review.average_score,
        "kpi_score": review.kpi_score,
        "created_at": review.created_at,
        "completed_at": review.completed_at,
        "template_id": review.template.id,
        "template_name": review.template.name,
        "template_items": review.template.items or [],
        "scores": review.scores,
        "manager_observations": review.manager_observations,
        "feedback_for_employee": review.feedback_for_employee,
        "admin_feedback_for_manager": review.admin_feedback_for_manager,
        "weekly_observations": review.weekly_observations,
        "previous_average_score": previous.average_score if previous else None,
        "previous_scores": previous.scores if previous else None,
    }


# --- Creation ---

def create_reviews(
    db: Session,
    actor: AuthContext,
    template_id: int,
    employee_ids: List[int],
    period: Optional[str] = None,
) -> dict:
    """
    Open a Pendente review per employee for the period (current month by
    default). Employees who already have one for the period are skipped.
    """
    template = get_template(db, template_id)
    period = period or current_period()

    employees = db.query(User).filter(User.id.in_(employee_ids)).all()
    if len(employees) != len(set(employee_ids)):
        raise NotFoundError("Colaborador não encontrado.")
    if actor.is_manager:
        outsiders = [e.name for e in employees if not access.is_team_member(actor, e)]
        if outsiders:
            raise ValidationFailedError(
                f"Colaborador(es) fora da sua equipe: {', '.join(outsiders)}."
            )

    created_count = 0
    skipped_count = 0
    for employee in employees:
        if find_review(db, employee.id, period):
            skipped_count += 1
            continue
        db.add(new_review(employee, actor.user_id, template, period))
        created_count += 1

    try:
        db.commit()
    except IntegrityError:
        # Another request opened a review for one of these employees meanwhile
        db.rollback()
        logger.warning(f"Duplicate review detected while creating reviews for {period}")
        raise ConflictError("Outra solicitação já iniciou avaliações para estes colaboradores. Tente novamente.")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating reviews")
        raise StoreError("Erro ao iniciar avaliações.")

    message = ""
    if created_count > 0:
        message += f"{created_count} avaliação(ões) iniciada(s) com sucesso. "
    if skipped_count > 0:
        message += f"{skipped_count} colaborador(es) já possui(am) avaliação para este mês."

    logger.info(
        f"Reviews opened for {period}",
        extra={"created_count": created_count, "skipped_count": skipped_count, "manager_id": actor.user_id},
    )
    return {"created_count": created_count, "skipped_count": skipped_count, "message": message.strip()}


# --- Lifecycle transitions ---

def _validate_scores(review: PerformanceReview, scores: dict):
    if review.template is None:
        raise NotFoundError("Modelo de avaliação não encontrado.")
    expected = {str(index) for index in range(len(review.template.items or []))}
    given = set(scores.keys())
    missing = sorted(expected - given, key=int)
    unknown = sorted(given - expected)
    if missing:
        raise ValidationFailedError(
            "Todos os itens devem ser avaliados antes do envio.",
            details={"missing_items": missing},
        )
    if unknown:
        raise ValidationFailedError(
            "Notas informadas para itens inexistentes no modelo.",
            details={"unknown_items": unknown},
        )


def submit_review(db: Session, actor: AuthContext, review_id: int, submission: ReviewSubmission) -> PerformanceReview:
    review = get_review(db, review_id)
    access.ensure_can_manage_review(actor, review)
    target = next_status(ReviewAction.SUBMIT, review.status)

    if len(submission.feedback_for_employee.strip()) < 20:
        raise ValidationFailedError("O feedback para o colaborador deve ter pelo menos 20 caracteres.")
    _validate_scores(review, submission.scores)

    before = _snapshot(review)
    review.scores = dict(submission.scores)
    review.average_score = calculate_average_score(submission.scores)
    review.manager_observations = submission.manager_observations
    review.feedback_for_employee = submission.feedback_for_employee
    review.admin_feedback_for_manager = ""
    review.status = target.value

    AuditService.log(
        db, actor,
        action="review_submitted",
        entity_type="review",
        entity_id=review.id,
        details={"period": review.period, "employee_id": review.employee_id},
        before_state=before,
        after_state=_snapshot(review),
    )
    commit_or_fail(db, "Erro ao submeter avaliação.")
    db.refresh(review)
    logger.info(f"Review {review.id} submitted", extra={"average_score": review.average_score})
    return review


def request_adjustment(db: Session, actor: AuthContext, review_id: int, feedback: str) -> PerformanceReview:
    access.require_admin(actor)
    review = get_review(db, review_id)
    target = next_status(ReviewAction.REQUEST_ADJUSTMENT, review.status)

    if len(feedback.strip()) < 10:
        raise ValidationFailedError("O feedback para o gestor deve ter pelo menos 10 caracteres.")

    before = _snapshot(review)
    review.status = target.value
    review.admin_feedback_for_manager = feedback

    AuditService.log(
        db, actor,
        action="review_adjustment_requested",
        entity_type="review",
        entity_id=review.id,
        details={"feedback": feedback},
        before_state=before,
        after_state=_snapshot(review),
    )
    NotificationService.notify_user(
        db, review.manager_id,
        "Ajuste solicitado",
        f"O RH solicitou ajustes na avaliação de {review.employee_name} ({review.period}).",
        NotificationType.WARNING,
        review_id=review.id,
    )
    commit_or_fail(db, "Erro ao solicitar ajuste.")
    db.refresh(review)
    return review


def complete_review(db: Session, actor: Optional[AuthContext], review: PerformanceReview, action: ReviewAction):
    """
    Move a review to Concluída. Shared by explicit approval and by the KPI
    apuração batch; the caller owns the commit.
    """
    target = next_status(action, review.status)
    before = _snapshot(review)
    review.status = target.value
    review.completed_at = datetime.now(timezone.utc)

    AuditService.log(
        db, actor,
        action="review_completed",
        entity_type="review",
        entity_id=review.id,
        details={"trigger": action.value, "period": review.period},
        before_state=before,
        after_state=_snapshot(review),
    )
    NotificationService.notify_user(
        db, review.employee_id,
        "Avaliação concluída",
        f"Sua avaliação de desempenho de {review.period} foi concluída.",
        NotificationType.SUCCESS,
        review_id=review.id,
    )


def approve_review(db: Session, actor: AuthContext, review_id: int) -> PerformanceReview:
    access.require_admin(actor)
    review = get_review(db, review_id)
    complete_review(db, actor, review, ReviewAction.APPROVE)
    commit_or_fail(db, "Erro ao aprovar avaliação.")
    db.refresh(review)
    return review


def delete_review(db: Session, actor: AuthContext, review_id: int):
    """Hard delete from any state; weekly observations go with it."""
    review = get_review(db, review_id)
    if not actor.is_admin:
        access.ensure_can_manage_review(actor, review)

    AuditService.log(
        db, actor,
        action="review_deleted",
        entity_type="review",
        entity_id=review.id,
        details={"employee_id": review.employee_id, "period": review.period},
        before_state=_snapshot(review),
    )
    db.delete(review)
    commit_or_fail(db, "Erro ao excluir avaliação.")


def suggest_feedback(db: Session, actor: AuthContext, review_id: int, request: FeedbackSuggestionRequest) -> str:
    review = get_review(db, review_id)
    access.ensure_can_manage_review(actor, review)
    if review.template is None:
        raise NotFoundError("Modelo de avaliação não encontrado.")

    scores = request.scores if request.scores is not None else (review.scores or {})
    if not scores:
        raise ValidationFailedError("Preencha as notas antes de gerar o feedback.")
    observations = (
        request.manager_observations
        if request.manager_observations is not None
        else review.manager_observations
    )
    return feedback_ai.generate_review_feedback(review.template.items or [], scores, observations)
