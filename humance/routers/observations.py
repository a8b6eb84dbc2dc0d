from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from humance.core.schemas import ActionResponse
from humance.database import get_db
from humance.routers.auth_deps import get_auth_context, require_manager
from humance.schemas.auth import AuthContext
from humance.schemas.observation import DiaryEntryResponse, ObservationForUserRequest
from humance.services import observation_service

router = APIRouter(prefix="/diary", tags=["observation diary"])


@router.get("/", response_model=List[DiaryEntryResponse])
def list_diary_entries(
    period: str = Query(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$"),
    employee_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return observation_service.list_diary_entries(db, actor, period, employee_id=employee_id)


@router.post("/", response_model=ActionResponse[DiaryEntryResponse], status_code=201)
def add_observation_for_user(
    request: ObservationForUserRequest,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_manager()),
):
    entry = observation_service.add_observation_for_user(db, actor, request.employee_id, request.text)
    return ActionResponse.ok("Observação registrada no diário.", DiaryEntryResponse.model_validate(entry))
