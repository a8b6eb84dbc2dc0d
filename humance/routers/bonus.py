from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from humance.core.schemas import ActionResponse
from humance.database import get_db
from humance.routers.auth_deps import require_admin
from humance.schemas.auth import AuthContext
from humance.schemas.bonus import BonusParameters, KpiBonusParameters
from humance.services import bonus_service

router = APIRouter(prefix="/bonus-parameters", tags=["bonus"])


@router.get("/performance", response_model=BonusParameters)
def get_bonus_parameters(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return bonus_service.get_bonus_parameters(db)


@router.put("/performance", response_model=ActionResponse[BonusParameters])
def update_bonus_parameters(
    params: BonusParameters,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    saved = bonus_service.update_bonus_parameters(db, actor, params)
    return ActionResponse.ok("Parâmetros de bônus salvos com sucesso.", saved)


@router.get("/kpi", response_model=KpiBonusParameters)
def get_kpi_bonus_parameters(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return bonus_service.get_kpi_bonus_parameters(db)


@router.put("/kpi", response_model=ActionResponse[KpiBonusParameters])
def update_kpi_bonus_parameters(
    params: KpiBonusParameters,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    saved = bonus_service.update_kpi_bonus_parameters(db, actor, params)
    return ActionResponse.ok("Parâmetros de bônus de KPI salvos com sucesso.", saved)
