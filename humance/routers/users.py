from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from humance.core.schemas import ActionResponse
from humance.database import get_db
from humance.routers.auth_deps import require_admin, require_manager
from humance.schemas.auth import AuthContext
from humance.schemas.user import UserCreate, UserResponse, UserUpdate
from humance.services import org_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=List[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return org_service.list_users(db)


@router.get("/team", response_model=List[UserResponse])
def my_team(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_manager()),
):
    """Members of the departments the caller leads."""
    return [u for u in org_service.team_for_manager(db, actor.user_id) if u.id != actor.user_id]


@router.post("/", response_model=ActionResponse[UserResponse], status_code=201)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    user = org_service.create_user(db, data)
    return ActionResponse.ok("Usuário criado com sucesso.", UserResponse.model_validate(user))


@router.put("/{user_id}", response_model=ActionResponse[UserResponse])
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    user = org_service.update_user(db, user_id, data)
    return ActionResponse.ok("Usuário atualizado com sucesso.", UserResponse.model_validate(user))


@router.delete("/{user_id}", response_model=ActionResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    org_service.delete_user(db, user_id)
    return ActionResponse.ok("Usuário excluído com sucesso.")
