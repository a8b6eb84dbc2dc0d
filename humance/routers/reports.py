from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from humance.core.schemas import ActionResponse
from humance.database import get_db
from humance.models.user import UserRole
from humance.routers.auth_deps import get_auth_context, require_admin, require_role
from humance.schemas.auth import AuthContext
from humance.schemas.report import (
    BonusReportRow,
    EmployeeOfTheMonth,
    LeaderboardRow,
    PerformanceHistoryPoint,
    ReviewStatusSummary,
    TeamHighlight,
)
from humance.services import report_service
from humance.services.review_service import current_period

router = APIRouter(prefix="/reports", tags=["reports"])

PERIOD_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


@router.get("/leaderboard", response_model=List[LeaderboardRow])
def leaderboard(
    period: str = Query(..., pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return report_service.leaderboard(db, period)


@router.get("/bonus", response_model=List[BonusReportRow])
def bonus_report(
    period: str = Query(..., pattern=PERIOD_PATTERN),
    department_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return report_service.bonus_report(db, period, department_id=department_id)


@router.get("/history/{employee_id}", response_model=List[PerformanceHistoryPoint])
def performance_history(
    employee_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return report_service.performance_history(db, actor, employee_id)


@router.get("/status-summary", response_model=List[ReviewStatusSummary])
def review_status_summary(
    period: Optional[str] = Query(None, pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return report_service.review_status_summary(db, actor, period or current_period())


@router.get("/team-highlight", response_model=Optional[TeamHighlight])
def team_highlight(
    period: Optional[str] = Query(None, pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_role([UserRole.MANAGER])),
):
    return report_service.team_highlight(db, actor, period or current_period())


@router.get("/employee-of-the-month", response_model=Optional[EmployeeOfTheMonth])
def employee_of_the_month(
    period: Optional[str] = Query(None, pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return report_service.employee_of_the_month(db, actor, period or current_period())


@router.put("/employee-of-the-month", response_model=ActionResponse[EmployeeOfTheMonth])
def update_employee_of_the_month(
    data: EmployeeOfTheMonth,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    saved = report_service.update_employee_of_the_month(db, actor, data)
    return ActionResponse.ok("Funcionário do Mês atualizado com sucesso!", EmployeeOfTheMonth(**saved))
