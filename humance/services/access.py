"""
Capability checks shared by the services.

The router resolves *who* is calling (AuthContext); these helpers decide
*what* that caller may touch. Admins see everything, managers see reviews
they own or employees of departments they lead, collaborators see themselves.
"""
from typing import Optional
from humance.core.exceptions import AccessDeniedError
from humance.models.performance_review import PerformanceReview
from humance.models.user import User
from humance.schemas.auth import AuthContext


def require_admin(actor: AuthContext):
    if not actor.is_admin:
        raise AccessDeniedError("Apenas administradores podem executar esta ação.")


def is_team_member(actor: AuthContext, employee: Optional[User]) -> bool:
    return (
        employee is not None
        and employee.department_id is not None
        and employee.department_id in actor.led_department_ids
    )


def can_read_review(actor: AuthContext, review: PerformanceReview) -> bool:
    if actor.is_admin:
        return True
    if actor.is_manager:
        return review.manager_id == actor.user_id or is_team_member(actor, review.employee)
    return review.employee_id == actor.user_id


def can_manage_review(actor: AuthContext, review: PerformanceReview) -> bool:
    """Fill in scores, observations and feedback."""
    if actor.is_admin:
        return True
    return actor.is_manager and review.manager_id == actor.user_id


def ensure_can_read_review(actor: AuthContext, review: PerformanceReview):
    if not can_read_review(actor, review):
        raise AccessDeniedError("Você não tem acesso a esta avaliação.")


def ensure_can_manage_review(actor: AuthContext, review: PerformanceReview):
    if not can_manage_review(actor, review):
        raise AccessDeniedError("Apenas o gestor responsável pode alterar esta avaliação.")


def ensure_can_view_employee(actor: AuthContext, employee: User):
    if actor.is_admin or employee.id == actor.user_id:
        return
    if actor.is_manager and is_team_member(actor, employee):
        return
    raise AccessDeniedError("Você não tem acesso aos dados deste colaborador.")
