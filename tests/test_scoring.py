import math
import pytest
from humance.models.kpi import IndicatorCondition, IndicatorType
from humance.models.user import UserRole
from humance.services.scoring import (
    BonusRule,
    Indicator,
    KpiBonusRule,
    calculate_average_score,
    calculate_kpi_score,
    evaluate_indicator,
    find_tier,
    resolve_bonus,
    resolve_kpi_bonus,
    resolve_performance_percentage,
    validate_tiers,
)

PERFORMANCE_RULES = [
    BonusRule(0, 3.99, 0),
    BonusRule(4, 6.99, 50),
    BonusRule(7, 10, 100),
]
KPI_RULES = [
    KpiBonusRule(0, 4.99, 0, 0),
    KpiBonusRule(5, 7.99, 250, 150),
    KpiBonusRule(8, 10, 500, 300),
]


def _indicator(type_, condition, weight=2, goal=100):
    return Indicator("Vendas", weight, goal, IndicatorType(type_), IndicatorCondition(condition))


@pytest.mark.parametrize("type_,condition,result,expected", [
    ("accelerator", "above", 120, 2),
    ("accelerator", "above", 100, 2),
    ("accelerator", "above", 80, 0),
    ("neutral", "below", 90, 2),
    ("neutral", "below", 110, 0),
    ("detractor", "above", 100, 0),
    ("detractor", "above", 99, -2),
    ("detractor", "below", 101, -2),
])
def test_evaluate_indicator(type_, condition, result, expected):
    assert evaluate_indicator(_indicator(type_, condition), result) == expected


@pytest.mark.parametrize("missing", [None, math.nan])
def test_missing_result_contributes_nothing(missing):
    assert evaluate_indicator(_indicator("detractor", "above"), missing) == 0
    assert evaluate_indicator(_indicator("accelerator", "above"), missing) == 0


def test_kpi_score_sums_contributions():
    indicators = [
        Indicator("Vendas", 3, 100, IndicatorType.ACCELERATOR, IndicatorCondition.ABOVE),
        Indicator("Reclamações", 2, 5, IndicatorType.DETRACTOR, IndicatorCondition.BELOW),
    ]
    assert calculate_kpi_score(indicators, {0: 120, 1: 7}) == 1
    assert calculate_kpi_score(indicators, {0: 120}) == 3
    assert calculate_kpi_score(indicators, {}) == 0
    assert calculate_kpi_score(indicators, {0: 50, 1: 9}) == -2


def test_kpi_score_is_not_clamped():
    indicators = [Indicator(f"I{i}", 6, 1, IndicatorType.ACCELERATOR, IndicatorCondition.ABOVE) for i in range(3)]
    assert calculate_kpi_score(indicators, {0: 2, 1: 2, 2: 2}) == 18


def test_indicator_from_dict():
    indicator = Indicator.from_dict(
        {"indicator": "Vendas", "weight": "3", "goal": 10, "type": "neutral", "condition": "below"}
    )
    assert indicator.weight == 3.0
    assert indicator.type == IndicatorType.NEUTRAL
    assert indicator.condition == IndicatorCondition.BELOW


def test_average_score():
    assert calculate_average_score({"0": 8, "1": 6, "2": 10}) == 8.0
    assert calculate_average_score({}) == 0


def test_performance_percentage_tiers():
    assert resolve_performance_percentage(8.0, PERFORMANCE_RULES) == 100
    assert resolve_performance_percentage(5.5, PERFORMANCE_RULES) == 50
    assert resolve_performance_percentage(3.99, PERFORMANCE_RULES) == 0
    # between tiers
    assert resolve_performance_percentage(3.995, PERFORMANCE_RULES) == 0
    assert resolve_performance_percentage(11, PERFORMANCE_RULES) == 0


def test_find_tier_is_first_match_wins():
    overlapping = [BonusRule(0, 10, 10), BonusRule(5, 10, 90)]
    assert find_tier(7, overlapping).bonus_percentage == 10


def test_kpi_bonus_by_role():
    assert resolve_kpi_bonus(6, KPI_RULES, is_leader=True) == 250
    assert resolve_kpi_bonus(6, KPI_RULES, is_leader=False) == 150
    assert resolve_kpi_bonus(-3, KPI_RULES, is_leader=True) == 0


def test_resolve_bonus_scales_kpi_bonus_by_performance():
    resolution = resolve_bonus(5.0, 9, UserRole.COLLABORATOR, PERFORMANCE_RULES, KPI_RULES)
    assert resolution.performance_bonus_percentage == 50
    assert resolution.base_kpi_bonus == 300
    assert resolution.final_kpi_bonus == 150.0


def test_resolve_bonus_for_manager_and_zero_tier():
    manager = resolve_bonus(8.0, 8, UserRole.MANAGER, PERFORMANCE_RULES, KPI_RULES)
    assert manager.final_kpi_bonus == 500

    low = resolve_bonus(2.0, 9, UserRole.MANAGER, PERFORMANCE_RULES, KPI_RULES)
    assert low.base_kpi_bonus == 500
    assert low.final_kpi_bonus == 0


def test_resolve_bonus_without_role_or_scores():
    missing_employee = resolve_bonus(9, 9, None, PERFORMANCE_RULES, KPI_RULES)
    assert missing_employee.performance_bonus_percentage == 100
    assert missing_employee.final_kpi_bonus == 0

    no_scores = resolve_bonus(None, None, UserRole.COLLABORATOR, PERFORMANCE_RULES, KPI_RULES)
    assert no_scores.performance_bonus_percentage == 0
    assert no_scores.final_kpi_bonus == 0


def test_validate_tiers_sorts_and_rejects_bad_ranges():
    ordered = validate_tiers([BonusRule(7, 10, 100), BonusRule(0, 6.99, 0)])
    assert [r.min_score for r in ordered] == [0, 7]

    with pytest.raises(ValueError):
        validate_tiers([BonusRule(5, 4, 10)])
    with pytest.raises(ValueError):
        validate_tiers([BonusRule(0, 5, 0), BonusRule(5, 10, 50)])
