import pytest
from humance.core.exceptions import AIError
from humance.models.performance_review import PerformanceReview, ReviewStatus
from humance.services import feedback_ai
from humance.services.ai_orchestrator import AIOrchestrator

ITEMS = [{"text": "Comunicação"}, {"text": "Entrega"}]


def test_prompt_lists_scored_items_and_observations():
    messages = feedback_ai.build_feedback_messages(ITEMS, {"0": 9, "1": 6.5}, "  Muito proativa.  ")
    assert messages[0]["role"] == "system"
    user_prompt = messages[1]["content"]
    assert "Comunicação - Nota: 9/10" in user_prompt
    assert "Entrega - Nota: 6.5/10" in user_prompt
    assert "Muito proativa." in user_prompt


def test_prompt_skips_unscored_items():
    messages = feedback_ai.build_feedback_messages(ITEMS, {"1": 7})
    assert "Comunicação" not in messages[1]["content"]


def test_empty_model_answer_is_an_error(monkeypatch):
    monkeypatch.setattr(AIOrchestrator, "call_model", classmethod(lambda cls, messages, temperature=0.7: "   "))
    with pytest.raises(AIError):
        feedback_ai.generate_review_feedback(ITEMS, {"0": 9, "1": 6})


def test_null_model_answer_is_an_error(monkeypatch):
    monkeypatch.setattr(AIOrchestrator, "call_model", classmethod(lambda cls, messages, temperature=0.7: None))
    with pytest.raises(AIError):
        feedback_ai.generate_review_feedback(ITEMS, {"0": 9, "1": 6})


def test_null_model_answer_returns_service_unavailable(client, db_session, manager_user, collaborator_user, template, auth_headers, monkeypatch):
    monkeypatch.setattr(AIOrchestrator, "call_model", classmethod(lambda cls, messages, temperature=0.7: None))
    review = PerformanceReview(
        employee_id=collaborator_user.id, employee_name=collaborator_user.name, manager_id=manager_user.id,
        department_id=collaborator_user.department_id, template_id=template.id,
        period="2024-05", status=ReviewStatus.PENDING.value,
    )
    db_session.add(review)
    db_session.commit()

    response = client.post(
        f"/api/reviews/{review.id}/feedback-suggestion",
        headers=auth_headers(manager_user),
        json={"scores": {"0": 9, "1": 8, "2": 7}},
    )
    assert response.status_code == 503
    assert response.json()["success"] is False


def test_feedback_suggestion_endpoint(client, db_session, manager_user, collaborator_user, template, auth_headers, monkeypatch):
    captured = {}

    def fake_call(cls, messages, temperature=0.7):
        captured["messages"] = messages
        return "Carla demonstrou excelente comunicação neste ciclo."

    monkeypatch.setattr(AIOrchestrator, "call_model", classmethod(fake_call))

    review = PerformanceReview(
        employee_id=collaborator_user.id, employee_name=collaborator_user.name, manager_id=manager_user.id,
        department_id=collaborator_user.department_id, template_id=template.id,
        period="2024-05", status=ReviewStatus.PENDING.value,
    )
    db_session.add(review)
    db_session.commit()

    response = client.post(
        f"/api/reviews/{review.id}/feedback-suggestion",
        headers=auth_headers(manager_user),
        json={"scores": {"0": 9, "1": 8, "2": 7}, "manager_observations": "Liderou a migração."},
    )
    assert response.status_code == 200
    assert response.json()["feedback"] == "Carla demonstrou excelente comunicação neste ciclo."
    assert "Liderou a migração." in captured["messages"][1]["content"]


def test_feedback_suggestion_needs_scores(client, db_session, manager_user, collaborator_user, template, auth_headers):
    review = PerformanceReview(
        employee_id=collaborator_user.id, employee_name=collaborator_user.name, manager_id=manager_user.id,
        department_id=collaborator_user.department_id, template_id=template.id,
        period="2024-05", status=ReviewStatus.PENDING.value,
    )
    db_session.add(review)
    db_session.commit()

    response = client.post(
        f"/api/reviews/{review.id}/feedback-suggestion",
        headers=auth_headers(manager_user),
        json={},
    )
    assert response.status_code == 422


def test_kill_switch_blocks_the_gateway(monkeypatch):
    from humance.core.config import settings
    from humance.core.exceptions import AIKillSwitchError

    monkeypatch.setattr(settings.ai, "kill_switch", True)
    with pytest.raises(AIKillSwitchError):
        AIOrchestrator.call_model([{"role": "user", "content": "oi"}])
