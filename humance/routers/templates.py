from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from humance.core.schemas import ActionResponse
from humance.database import get_db
from humance.routers.auth_deps import require_admin, require_manager
from humance.schemas.auth import AuthContext
from humance.schemas.template import TemplateAssignmentRequest, TemplateCreate, TemplateResponse
from humance.services import template_service

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("/", response_model=List[TemplateResponse])
def list_templates(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return template_service.list_templates(db)


@router.get("/assigned", response_model=List[TemplateResponse])
def list_assigned_templates(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_manager()),
):
    """Templates the calling manager may use to open reviews."""
    return template_service.assigned_templates_for_manager(db, actor.user_id)


@router.post("/", response_model=ActionResponse[TemplateResponse], status_code=201)
def create_template(
    data: TemplateCreate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    template = template_service.create_template(db, data)
    return ActionResponse.ok("Modelo criado com sucesso.", TemplateResponse.model_validate(template))


@router.put("/{template_id}", response_model=ActionResponse[TemplateResponse])
def update_template(
    template_id: int,
    data: TemplateCreate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    template = template_service.update_template(db, template_id, data)
    return ActionResponse.ok("Modelo atualizado com sucesso.", TemplateResponse.model_validate(template))


@router.delete("/{template_id}", response_model=ActionResponse)
def delete_template(
    template_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    template_service.delete_template(db, template_id)
    return ActionResponse.ok("Modelo excluído com sucesso.")


@router.post("/assign", response_model=ActionResponse)
def assign_template(
    request: TemplateAssignmentRequest,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    created = template_service.assign_template(db, request.template_id, request.manager_ids)
    return ActionResponse.ok(f"Modelo atribuído a {created} gestor(es).", {"created_count": created})
