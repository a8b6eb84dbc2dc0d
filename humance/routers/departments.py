from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from humance.core.schemas import ActionResponse
from humance.database import get_db
from humance.routers.auth_deps import get_auth_context, require_admin
from humance.schemas.auth import AuthContext
from humance.schemas.department import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    ManagerResponse,
)
from humance.services import org_service

router = APIRouter(prefix="/departments", tags=["departments"])


@router.get("/", response_model=List[DepartmentResponse])
def list_departments(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return org_service.list_departments(db)


@router.get("/managers", response_model=List[ManagerResponse])
def list_managers(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return org_service.list_managers(db)


@router.post("/", response_model=ActionResponse[DepartmentResponse], status_code=201)
def create_department(
    data: DepartmentCreate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    department = org_service.create_department(db, data)
    return ActionResponse.ok("Setor criado com sucesso.", DepartmentResponse.model_validate(department))


@router.put("/{department_id}", response_model=ActionResponse[DepartmentResponse])
def update_department(
    department_id: int,
    data: DepartmentUpdate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    department = org_service.update_department(db, department_id, data)
    return ActionResponse.ok("Setor atualizado com sucesso.", DepartmentResponse.model_validate(department))


@router.delete("/{department_id}", response_model=ActionResponse)
def delete_department(
    department_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    org_service.delete_department(db, department_id)
    return ActionResponse.ok("Setor excluído com sucesso.")
