"""
Aggregations over completed reviews: leader ranking, bonus report,
individual history and the dashboard summaries. The dashboard's employee of
the month is the one value here HR can also set by hand.
"""
import logging
import unicodedata
from collections import defaultdict
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from humance.models.bonus_parameters import EMPLOYEE_OF_THE_MONTH_KEY, ConfigDocument
from humance.models.department import Department
from humance.models.performance_review import PerformanceReview, ReviewStatus
from humance.models.user import User, UserRole
from humance.schemas.auth import AuthContext
from humance.schemas.report import EmployeeOfTheMonth
from humance.services import access, bonus_service
from humance.services.audit import AuditService
from humance.services.base import commit_or_fail
from humance.services.org_service import get_user, team_for_manager
from humance.services.scoring import resolve_bonus, resolve_kpi_bonus

logger = logging.getLogger(__name__)


def _name_key(name: Optional[str]) -> str:
    """Accent and case insensitive ordering for person names."""
    decomposed = unicodedata.normalize("NFKD", name or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _completed_reviews(db: Session, period: str):
    return db.query(PerformanceReview).filter(
        PerformanceReview.period == period,
        PerformanceReview.status == ReviewStatus.COMPLETED.value,
    )


def leaderboard(db: Session, period: str) -> List[dict]:
    """
    Rank managers by the mean score of their team's completed reviews.

    Reviews without a score still count in the denominator. The KPI bonus
    shown here is the leader tier value before the performance scaling the
    bonus report applies.
    """
    kpi_rules = bonus_service.kpi_rules(db)

    team_by_manager = defaultdict(list)
    rows = (
        db.query(Department.leader_id, User.id)
        .join(User, User.department_id == Department.id)
        .filter(Department.leader_id.isnot(None))
        .all()
    )
    for leader_id, member_id in rows:
        team_by_manager[leader_id].append(member_id)

    reviews_by_employee = defaultdict(list)
    for review in _completed_reviews(db, period).order_by(PerformanceReview.id):
        reviews_by_employee[review.employee_id].append(review)

    managers = db.query(User).filter(User.role == UserRole.MANAGER).all()
    board = []
    for manager in managers:
        team_ids = set(team_by_manager.get(manager.id, []))
        if not team_ids:
            continue
        team_reviews = [r for employee_id in sorted(team_ids) for r in reviews_by_employee.get(employee_id, [])]
        if not team_reviews:
            continue

        average = sum(r.average_score or 0 for r in team_reviews) / len(team_reviews)
        kpi_score = next((r.kpi_score for r in team_reviews if r.kpi_score is not None), 0.0)
        board.append({
            "leader_id": manager.id,
            "leader_name": manager.name,
            "average_score": average,
            "kpi_score": kpi_score,
            "kpi_bonus": resolve_kpi_bonus(kpi_score, kpi_rules, is_leader=True),
            "total_reviews": len(team_reviews),
            "team_size": len(team_ids),
        })

    board.sort(key=lambda row: row["average_score"], reverse=True)
    return board


def bonus_report(db: Session, period: str, department_id: Optional[int] = None) -> List[dict]:
    query = _completed_reviews(db, period)
    if department_id is not None:
        if not db.get(Department, department_id):
            return []
        query = query.filter(PerformanceReview.department_id == department_id)
    reviews = query.all()
    if not reviews:
        return []

    performance_rules = bonus_service.performance_rules(db)
    kpi_rules = bonus_service.kpi_rules(db)

    roles = {
        user_id: role
        for user_id, role in db.query(User.id, User.role).filter(
            User.id.in_([r.employee_id for r in reviews])
        )
    }

    report = []
    for review in reviews:
        role = roles.get(review.employee_id)
        resolution = resolve_bonus(
            review.average_score, review.kpi_score, role, performance_rules, kpi_rules
        )
        report.append({
            "review_id": review.id,
            "employee_id": review.employee_id,
            "employee_name": review.employee_name,
            "department_name": review.department_name,
            "role": role.value if role else None,
            "average_score": review.average_score or 0,
            "kpi_score": review.kpi_score or 0,
            "performance_bonus_percentage": resolution.performance_bonus_percentage,
            "kpi_bonus_value": resolution.final_kpi_bonus,
        })

    report.sort(key=lambda row: _name_key(row["employee_name"]))
    return report


def performance_history(db: Session, actor: AuthContext, employee_id: int) -> List[dict]:
    employee = get_user(db, employee_id)
    access.ensure_can_view_employee(actor, employee)

    reviews = (
        db.query(PerformanceReview.period, PerformanceReview.average_score)
        .filter(
            PerformanceReview.employee_id == employee.id,
            PerformanceReview.status == ReviewStatus.COMPLETED.value,
        )
        .order_by(PerformanceReview.period.desc())
        .all()
    )
    return [{"period": period, "average_score": average} for period, average in reviews]


def _people_in_scope(db: Session, actor: AuthContext) -> List[User]:
    if actor.is_admin:
        return db.query(User).filter(User.role != UserRole.ADMIN).order_by(User.name).all()
    if actor.is_manager:
        return [u for u in team_for_manager(db, actor.user_id) if u.id != actor.user_id]
    return []


def review_status_summary(db: Session, actor: AuthContext, period: str) -> List[dict]:
    """Everyone in the caller's scope, with Pendente for those not yet opened."""
    people = _people_in_scope(db, actor)
    if not people:
        return []

    reviews = {
        review.employee_id: review
        for review in db.query(PerformanceReview).filter(
            PerformanceReview.period == period,
            PerformanceReview.employee_id.in_([p.id for p in people]),
        )
    }

    summary = []
    for person in people:
        review = reviews.get(person.id)
        summary.append({
            "employee_id": person.id,
            "employee_name": person.name,
            "employee_role": person.role.value,
            "status": review.status if review else ReviewStatus.PENDING.value,
            "average_score": review.average_score if review else None,
            "review_id": review.id if review else None,
        })
    summary.sort(key=lambda row: _name_key(row["employee_name"]))
    return summary


def team_highlight(db: Session, actor: AuthContext, period: str) -> Optional[dict]:
    team_ids = [u.id for u in team_for_manager(db, actor.user_id) if u.id != actor.user_id]
    if not team_ids:
        return None

    best = (
        _completed_reviews(db, period)
        .filter(
            PerformanceReview.employee_id.in_(team_ids),
            PerformanceReview.average_score.isnot(None),
        )
        .order_by(PerformanceReview.average_score.desc(), PerformanceReview.employee_name)
        .first()
    )
    if best is None:
        return None

    return {
        "employee_id": best.employee_id,
        "name": best.employee_name,
        "role": best.employee_role or UserRole.COLLABORATOR.value,
        "reason": f"Maior nota de desempenho da equipe em {period}: {best.average_score:.1f}.",
    }


EMPLOYEE_OF_THE_MONTH_PLACEHOLDER = {
    "name": "Funcionário do Mês",
    "role": "Definir no painel",
    "reason": "Aguardando definição do RH.",
    "image_url": "",
}


def employee_of_the_month(db: Session, actor: AuthContext, period: str) -> Optional[dict]:
    """
    Managers get their team's top completed review for the period. Everyone
    else sees the highlight HR set, or a placeholder until HR sets one.
    """
    if actor.is_manager:
        return team_highlight(db, actor, period)

    try:
        document = db.get(ConfigDocument, EMPLOYEE_OF_THE_MONTH_KEY)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not load employee of the month")
        return None
    if document is None:
        return dict(EMPLOYEE_OF_THE_MONTH_PLACEHOLDER)
    return document.data


def update_employee_of_the_month(db: Session, actor: AuthContext, data: EmployeeOfTheMonth) -> dict:
    access.require_admin(actor)
    payload = data.model_dump()

    document = db.get(ConfigDocument, EMPLOYEE_OF_THE_MONTH_KEY)
    before = document.data if document else None
    if document is None:
        db.add(ConfigDocument(key=EMPLOYEE_OF_THE_MONTH_KEY, data=payload))
    else:
        document.data = payload

    AuditService.log(
        db, actor,
        action="employee_of_the_month_updated",
        entity_type="config",
        entity_id=None,
        details={"key": EMPLOYEE_OF_THE_MONTH_KEY},
        before_state=before,
        after_state=payload,
    )
    commit_or_fail(db, "Erro ao atualizar o Funcionário do Mês.")
    return payload
