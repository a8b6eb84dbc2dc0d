"""
Review lifecycle.

    Pendente ──submit──> Em Aprovação ──approve / apuração de KPI──> Concluída
                              │  ▲
           request_adjustment │  │ submit
                              ▼  │
                        Ajuste Solicitado

Concluída is terminal. kpi_score is not governed here: it belongs to the
KPI apuração batch, which may write or clear it in any state.
"""
import enum
from typing import Dict, FrozenSet, Tuple, Union

from humance.core.exceptions import InvalidTransitionError
from humance.models.performance_review import ReviewStatus


class ReviewAction(str, enum.Enum):
    SUBMIT = "submit"
    REQUEST_ADJUSTMENT = "request_adjustment"
    APPROVE = "approve"
    KPI_COMPLETION = "kpi_completion"


TRANSITIONS: Dict[ReviewAction, Tuple[FrozenSet[ReviewStatus], ReviewStatus]] = {
    ReviewAction.SUBMIT: (
        frozenset({ReviewStatus.PENDING, ReviewStatus.ADJUSTMENT_REQUESTED}),
        ReviewStatus.AWAITING_APPROVAL,
    ),
    ReviewAction.REQUEST_ADJUSTMENT: (
        frozenset({ReviewStatus.AWAITING_APPROVAL}),
        ReviewStatus.ADJUSTMENT_REQUESTED,
    ),
    ReviewAction.APPROVE: (
        frozenset({ReviewStatus.AWAITING_APPROVAL}),
        ReviewStatus.COMPLETED,
    ),
    ReviewAction.KPI_COMPLETION: (
        frozenset({ReviewStatus.AWAITING_APPROVAL}),
        ReviewStatus.COMPLETED,
    ),
}

_MANAGER_FIELDS = frozenset({
    "scores",
    "average_score",
    "manager_observations",
    "feedback_for_employee",
    "weekly_observations",
})

MUTABLE_FIELDS: Dict[ReviewStatus, FrozenSet[str]] = {
    ReviewStatus.PENDING: _MANAGER_FIELDS,
    ReviewStatus.ADJUSTMENT_REQUESTED: _MANAGER_FIELDS,
    ReviewStatus.AWAITING_APPROVAL: frozenset({"admin_feedback_for_manager", "weekly_observations"}),
    ReviewStatus.COMPLETED: frozenset(),
}


def _as_status(status: Union[str, ReviewStatus]) -> ReviewStatus:
    return status if isinstance(status, ReviewStatus) else ReviewStatus(status)


def can_apply(action: ReviewAction, status: Union[str, ReviewStatus]) -> bool:
    sources, _ = TRANSITIONS[action]
    return _as_status(status) in sources


def next_status(action: ReviewAction, status: Union[str, ReviewStatus]) -> ReviewStatus:
    """Target status for `action`, or InvalidTransitionError when not allowed from `status`."""
    current = _as_status(status)
    sources, target = TRANSITIONS[action]
    if current not in sources:
        raise InvalidTransitionError(action.value, current.value)
    return target


def is_terminal(status: Union[str, ReviewStatus]) -> bool:
    return _as_status(status) == ReviewStatus.COMPLETED


def can_edit_field(status: Union[str, ReviewStatus], field: str) -> bool:
    return field in MUTABLE_FIELDS[_as_status(status)]
