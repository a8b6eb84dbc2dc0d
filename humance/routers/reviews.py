from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from humance.core.schemas import ActionResponse
from humance.database import get_db
from humance.routers.auth_deps import get_auth_context, require_admin, require_manager
from humance.schemas.auth import AuthContext
from humance.schemas.review import (
    FeedbackSuggestion,
    FeedbackSuggestionRequest,
    ReviewAdjustmentRequest,
    ReviewCreateRequest,
    ReviewCreateResult,
    ReviewDetail,
    ReviewSubmission,
    ReviewSummary,
    WeeklyObservationCreate,
    WeeklyObservationResponse,
)
from humance.services import observation_service, review_service

router = APIRouter(prefix="/reviews", tags=["reviews"])

PERIOD_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


@router.get("/", response_model=List[ReviewSummary])
def list_reviews(
    department_id: Optional[int] = None,
    period: Optional[str] = Query(None, pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return review_service.list_reviews(db, actor, department_id=department_id, period=period)


@router.post("/", response_model=ActionResponse[ReviewCreateResult], status_code=201)
def create_reviews(
    request: ReviewCreateRequest,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_manager()),
):
    result = review_service.create_reviews(
        db, actor, request.template_id, request.employee_ids, request.period
    )
    return ActionResponse.ok(
        result["message"],
        ReviewCreateResult(created_count=result["created_count"], skipped_count=result["skipped_count"]),
    )


@router.get("/{review_id}", response_model=ReviewDetail)
def get_review(
    review_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return review_service.get_review_details(db, actor, review_id)


@router.post("/{review_id}/submit", response_model=ActionResponse[ReviewSummary])
def submit_review(
    review_id: int,
    submission: ReviewSubmission,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_manager()),
):
    review = review_service.submit_review(db, actor, review_id, submission)
    return ActionResponse.ok(
        "Avaliação submetida para aprovação do RH.",
        ReviewSummary.model_validate(review),
    )


@router.post("/{review_id}/request-adjustment", response_model=ActionResponse[ReviewSummary])
def request_adjustment(
    review_id: int,
    request: ReviewAdjustmentRequest,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    review = review_service.request_adjustment(db, actor, review_id, request.feedback)
    return ActionResponse.ok("Ajuste solicitado ao gestor.", ReviewSummary.model_validate(review))


@router.post("/{review_id}/approve", response_model=ActionResponse[ReviewSummary])
def approve_review(
    review_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    review = review_service.approve_review(db, actor, review_id)
    return ActionResponse.ok("Avaliação aprovada e concluída.", ReviewSummary.model_validate(review))


@router.delete("/{review_id}", response_model=ActionResponse)
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_manager()),
):
    review_service.delete_review(db, actor, review_id)
    return ActionResponse.ok("Avaliação excluída com sucesso.")


@router.post("/{review_id}/feedback-suggestion", response_model=FeedbackSuggestion)
def suggest_feedback(
    review_id: int,
    request: FeedbackSuggestionRequest,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_manager()),
):
    return {"feedback": review_service.suggest_feedback(db, actor, review_id, request)}


# --- Weekly observations ---

@router.post(
    "/{review_id}/observations",
    response_model=ActionResponse[WeeklyObservationResponse],
    status_code=201,
)
def add_weekly_observation(
    review_id: int,
    request: WeeklyObservationCreate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_manager()),
):
    observation = observation_service.add_weekly_observation(db, actor, review_id, request.text)
    return ActionResponse.ok(
        "Observação adicionada.",
        WeeklyObservationResponse.model_validate(observation),
    )


@router.delete("/{review_id}/observations/{observation_id}", response_model=ActionResponse)
def delete_weekly_observation(
    review_id: int,
    observation_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_manager()),
):
    observation_service.delete_weekly_observation(db, actor, review_id, observation_id)
    return ActionResponse.ok("Observação excluída.")
