"""
Performance & KPI scoring rules.

Pure functions over plain records: no session, no I/O. The services feed
them with data loaded from the database and persist what they return.

- KPI: every indicator of a department model is checked against its goal
  and contributes signed points; the KPI score is the plain sum.
- Competency: the manager's 0-10 item scores are averaged.
- Bonus: both scores are looked up in tier tables. The KPI bonus value is
  scaled by the performance bonus percentage.
"""
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from humance.models.kpi import IndicatorCondition, IndicatorType
from humance.models.user import UserRole

Number = Union[int, float]


@dataclass(frozen=True)
class Indicator:
    indicator: str
    weight: float
    goal: float
    type: IndicatorType
    condition: IndicatorCondition

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Indicator":
        return cls(
            indicator=data.get("indicator", ""),
            weight=float(data["weight"]),
            goal=float(data["goal"]),
            type=IndicatorType(data["type"]),
            condition=IndicatorCondition(data["condition"]),
        )


@dataclass(frozen=True)
class BonusRule:
    min_score: float
    max_score: float
    bonus_percentage: float


@dataclass(frozen=True)
class KpiBonusRule:
    min_score: float
    max_score: float
    bonus_value_leader: float
    bonus_value_led: float


@dataclass(frozen=True)
class BonusResolution:
    performance_bonus_percentage: float
    base_kpi_bonus: float
    final_kpi_bonus: float


def _is_missing(value: Optional[Number]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def is_condition_met(indicator: Indicator, result: Number) -> bool:
    if indicator.condition == IndicatorCondition.ABOVE:
        return result >= indicator.goal
    return result <= indicator.goal


def evaluate_indicator(indicator: Indicator, result: Optional[Number]) -> float:
    """
    Signed points contributed by one indicator.

    Accelerators and neutrals earn their weight when the goal is met.
    Detractors cost their weight when the goal is missed.
    A missing (or NaN) result contributes nothing.
    """
    if _is_missing(result):
        return 0.0

    met = is_condition_met(indicator, result)
    if indicator.type == IndicatorType.DETRACTOR:
        return 0.0 if met else -indicator.weight
    return indicator.weight if met else 0.0


def calculate_kpi_score(
    indicators: Sequence[Indicator],
    results: Mapping[int, Optional[Number]],
) -> float:
    """Sum of contributions; `results` is keyed by indicator position. Not clamped."""
    return sum(
        (evaluate_indicator(indicator, results.get(index)) for index, indicator in enumerate(indicators)),
        0.0,
    )


def calculate_average_score(scores: Mapping[Any, Number]) -> float:
    values = list(scores.values())
    if not values:
        return 0.0
    return sum(values) / len(values)


def find_tier(score: Number, rules: Sequence[Any]):
    """First rule with min_score <= score <= max_score, in list order."""
    for rule in rules:
        if rule.min_score <= score <= rule.max_score:
            return rule
    return None


def validate_tiers(rules: Sequence[Any]) -> list:
    """
    Sort tier rules by min_score and reject inverted or overlapping ranges.
    Gaps between tiers are allowed: a score inside a gap matches no tier.
    """
    ordered = sorted(rules, key=lambda r: (r.min_score, r.max_score))
    for rule in ordered:
        if rule.min_score > rule.max_score:
            raise ValueError(
                f"Faixa inválida: mínimo {rule.min_score} maior que máximo {rule.max_score}."
            )
    for previous, current in zip(ordered, ordered[1:]):
        if current.min_score <= previous.max_score:
            raise ValueError(
                f"Faixas sobrepostas: {previous.min_score}-{previous.max_score} "
                f"e {current.min_score}-{current.max_score}."
            )
    return ordered


def resolve_performance_percentage(average_score: Number, rules: Sequence[BonusRule]) -> float:
    rule = find_tier(average_score, rules)
    return rule.bonus_percentage if rule else 0.0


def resolve_kpi_bonus(kpi_score: Number, rules: Sequence[KpiBonusRule], is_leader: bool) -> float:
    rule = find_tier(kpi_score, rules)
    if rule is None:
        return 0.0
    return rule.bonus_value_leader if is_leader else rule.bonus_value_led


def resolve_bonus(
    average_score: Optional[Number],
    kpi_score: Optional[Number],
    role: Optional[UserRole],
    performance_rules: Sequence[BonusRule],
    kpi_rules: Sequence[KpiBonusRule],
) -> BonusResolution:
    """
    Resolve the performance percentage and the KPI bonus for one reviewed employee.

    The KPI bonus tier is picked by role (Gerente gets the leader value) and then
    scaled by the performance percentage, so a 0% performance tier zeroes it.
    A missing role (employee no longer exists) yields no KPI bonus.
    """
    percentage = resolve_performance_percentage(average_score or 0, performance_rules)
    base = 0.0
    if role is not None:
        base = resolve_kpi_bonus(kpi_score or 0, kpi_rules, is_leader=role == UserRole.MANAGER)
    return BonusResolution(
        performance_bonus_percentage=percentage,
        base_kpi_bonus=base,
        final_kpi_bonus=base * (percentage / 100),
    )
