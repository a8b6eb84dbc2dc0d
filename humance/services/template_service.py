"""
Review templates and their assignment to managers.
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from humance.core.exceptions import NotFoundError, ValidationFailedError
from humance.models.review_template import ReviewTemplate, TemplateAssignment
from humance.models.user import User, UserRole
from humance.schemas.template import TemplateCreate
from humance.services.base import commit_or_fail

logger = logging.getLogger(__name__)


def get_template(db: Session, template_id: int) -> ReviewTemplate:
    template = db.get(ReviewTemplate, template_id)
    if not template:
        raise NotFoundError("Modelo de avaliação não encontrado.")
    return template


def list_templates(db: Session) -> List[dict]:
    templates = db.query(ReviewTemplate).order_by(ReviewTemplate.created_at, ReviewTemplate.id).all()
    results = []
    for template in templates:
        managers = {}
        for assignment in template.assignments:
            if assignment.manager is not None:
                managers[assignment.manager.id] = assignment.manager.name
        results.append({
            "id": template.id,
            "name": template.name,
            "items": template.items or [],
            "created_at": template.created_at,
            "assigned_managers": [{"id": mid, "name": name} for mid, name in managers.items()],
        })
    return results


def create_template(db: Session, data: TemplateCreate) -> ReviewTemplate:
    template = ReviewTemplate(
        name=data.name.strip(),
        items=[item.model_dump() for item in data.items],
    )
    db.add(template)
    commit_or_fail(db, "Erro ao salvar modelo.")
    db.refresh(template)
    return template


def update_template(db: Session, template_id: int, data: TemplateCreate) -> ReviewTemplate:
    """
    Existing reviews keep their frozen scores; only new submissions see the
    new item list.
    """
    template = get_template(db, template_id)
    template.name = data.name.strip()
    template.items = [item.model_dump() for item in data.items]
    commit_or_fail(db, "Erro ao salvar modelo.")
    db.refresh(template)
    return template


def delete_template(db: Session, template_id: int):
    template = get_template(db, template_id)
    db.delete(template)
    commit_or_fail(db, "Erro ao excluir modelo.")


def assign_template(db: Session, template_id: int, manager_ids: List[int]) -> int:
    """Returns how many new assignments were created. Re-assigning is a no-op."""
    get_template(db, template_id)

    unique_ids = list(dict.fromkeys(manager_ids))
    managers = db.query(User).filter(User.id.in_(unique_ids), User.role == UserRole.MANAGER).all()
    if len(managers) != len(unique_ids):
        raise ValidationFailedError("Dados de atribuição inválidos.")

    already_assigned = {
        row[0]
        for row in db.query(TemplateAssignment.manager_id).filter(
            TemplateAssignment.template_id == template_id,
            TemplateAssignment.manager_id.in_(unique_ids),
        )
    }
    created = 0
    for manager_id in unique_ids:
        if manager_id in already_assigned:
            continue
        db.add(TemplateAssignment(template_id=template_id, manager_id=manager_id, status="Pendente"))
        created += 1

    commit_or_fail(db, "Erro ao atribuir modelo.")
    logger.info(f"Template {template_id} assigned to {created} manager(s)")
    return created


def assigned_templates_for_manager(db: Session, manager_id: int) -> List[ReviewTemplate]:
    return (
        db.query(ReviewTemplate)
        .join(TemplateAssignment, TemplateAssignment.template_id == ReviewTemplate.id)
        .filter(TemplateAssignment.manager_id == manager_id)
        .order_by(TemplateAssignment.id)
        .all()
    )
