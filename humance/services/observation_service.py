"""
Manager notes: weekly observations on a review and the observation diary.
"""
import calendar
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from humance.core.exceptions import InvalidTransitionError, NotFoundError, ValidationFailedError
from humance.models.diary_entry import DiaryEntry
from humance.models.performance_review import WeeklyObservation
from humance.schemas.auth import AuthContext
from humance.services import access
from humance.services.base import commit_or_fail
from humance.services.org_service import get_user
from humance.services.review_lifecycle import can_edit_field
from humance.services.review_service import current_period, find_review, get_review, new_review
from humance.services.template_service import assigned_templates_for_manager

logger = logging.getLogger(__name__)


def _ensure_observations_open(review):
    if not can_edit_field(review.status, "weekly_observations"):
        raise InvalidTransitionError("add_observation", review.status)


def add_weekly_observation(db: Session, actor: AuthContext, review_id: int, text: str) -> WeeklyObservation:
    review = get_review(db, review_id)
    access.ensure_can_manage_review(actor, review)
    _ensure_observations_open(review)

    text = text.strip()
    if not text:
        raise ValidationFailedError("A observação não pode estar vazia.")

    observation = WeeklyObservation(review_id=review.id, text=text)
    db.add(observation)
    commit_or_fail(db, "Erro ao adicionar observação.")
    db.refresh(observation)
    return observation


def delete_weekly_observation(db: Session, actor: AuthContext, review_id: int, observation_id: int):
    review = get_review(db, review_id)
    access.ensure_can_manage_review(actor, review)
    _ensure_observations_open(review)

    observation = db.get(WeeklyObservation, observation_id)
    if not observation or observation.review_id != review.id:
        raise NotFoundError("Observação não encontrada.")
    db.delete(observation)
    commit_or_fail(db, "Erro ao excluir observação.")


def add_observation_for_user(db: Session, actor: AuthContext, employee_id: int, text: str) -> DiaryEntry:
    """
    Diary note about an employee. Opens the employee's review for the
    current month from the manager's first assigned template when missing.
    """
    text = text.strip()
    if not text:
        raise ValidationFailedError("A observação não pode estar vazia.")

    employee = get_user(db, employee_id)
    if actor.is_manager and not access.is_team_member(actor, employee):
        raise ValidationFailedError("Colaborador fora da sua equipe.")

    period = current_period()
    review = find_review(db, employee.id, period)
    if review is None:
        templates = assigned_templates_for_manager(db, actor.user_id)
        if not templates:
            raise ValidationFailedError(
                "Nenhum modelo de avaliação atribuído a você. Peça ao RH para atribuir um modelo."
            )
        review = new_review(employee, actor.user_id, templates[0], period)
        db.add(review)
        db.flush()
        logger.info(f"Review opened for employee {employee.id} from diary entry", extra={"period": period})

    entry = DiaryEntry(
        text=text,
        review_id=review.id,
        employee_id=employee.id,
        employee_name=employee.name,
        author_id=actor.user_id,
        author_name=actor.name,
    )
    db.add(entry)
    commit_or_fail(db, "Erro ao adicionar observação.")
    db.refresh(entry)
    return entry


def _month_bounds(period: str):
    year, month = (int(part) for part in period.split("-"))
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=timezone.utc)
    return start, end


def list_diary_entries(
    db: Session,
    actor: AuthContext,
    period: str,
    employee_id: Optional[int] = None,
) -> List[DiaryEntry]:
    if actor.is_collaborator:
        return []

    start, end = _month_bounds(period)
    query = db.query(DiaryEntry).filter(DiaryEntry.created_at >= start, DiaryEntry.created_at <= end)
    if actor.is_manager:
        query = query.filter(DiaryEntry.author_id == actor.user_id)
    if employee_id is not None:
        query = query.filter(DiaryEntry.employee_id == employee_id)
    return query.order_by(DiaryEntry.created_at.desc(), DiaryEntry.id.desc()).all()
