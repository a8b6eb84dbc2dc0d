from datetime import datetime, timezone
from humance.models.diary_entry import DiaryEntry
from humance.models.performance_review import PerformanceReview, ReviewStatus
from humance.services.review_service import current_period


def _review(db_session, employee, manager, template, status=ReviewStatus.PENDING):
    review = PerformanceReview(
        employee_id=employee.id, employee_name=employee.name, manager_id=manager.id,
        department_id=employee.department_id, template_id=template.id,
        period="2024-05", status=status.value,
    )
    db_session.add(review)
    db_session.commit()
    return review


def test_weekly_observations_newest_first(client, db_session, manager_user, collaborator_user, template, auth_headers):
    review = _review(db_session, collaborator_user, manager_user, template)
    for text in ("Semana 1: entregou o relatório.", "Semana 2: apoiou um colega."):
        response = client.post(
            f"/api/reviews/{review.id}/observations",
            headers=auth_headers(manager_user),
            json={"text": text},
        )
        assert response.status_code == 201

    details = client.get(f"/api/reviews/{review.id}", headers=auth_headers(manager_user)).json()
    assert [o["text"] for o in details["weekly_observations"]] == [
        "Semana 2: apoiou um colega.",
        "Semana 1: entregou o relatório.",
    ]


def test_blank_observation_is_rejected(client, db_session, manager_user, collaborator_user, template, auth_headers):
    review = _review(db_session, collaborator_user, manager_user, template)
    response = client.post(
        f"/api/reviews/{review.id}/observations",
        headers=auth_headers(manager_user),
        json={"text": "    "},
    )
    assert response.status_code == 422


def test_completed_review_is_closed_for_observations(client, db_session, manager_user, collaborator_user, template, auth_headers):
    review = _review(db_session, collaborator_user, manager_user, template, status=ReviewStatus.COMPLETED)
    response = client.post(
        f"/api/reviews/{review.id}/observations",
        headers=auth_headers(manager_user),
        json={"text": "Tarde demais."},
    )
    assert response.status_code == 409


def test_delete_weekly_observation(client, db_session, manager_user, collaborator_user, template, auth_headers):
    review = _review(db_session, collaborator_user, manager_user, template)
    created = client.post(
        f"/api/reviews/{review.id}/observations",
        headers=auth_headers(manager_user),
        json={"text": "Observação temporária."},
    ).json()["data"]

    response = client.delete(
        f"/api/reviews/{review.id}/observations/{created['id']}",
        headers=auth_headers(manager_user),
    )
    assert response.status_code == 200
    missing = client.delete(
        f"/api/reviews/{review.id}/observations/{created['id']}",
        headers=auth_headers(manager_user),
    )
    assert missing.status_code == 404


def test_diary_entry_opens_current_review(client, db_session, manager_user, collaborator_user, template, auth_headers):
    response = client.post(
        "/api/diary/",
        headers=auth_headers(manager_user),
        json={"employee_id": collaborator_user.id, "text": "Resolveu um chamado crítico."},
    )
    assert response.status_code == 201
    entry = response.json()["data"]
    assert entry["author_name"] == "Marcos Gerente"

    review = db_session.query(PerformanceReview).filter(
        PerformanceReview.employee_id == collaborator_user.id,
        PerformanceReview.period == current_period(),
    ).one()
    assert review.template_id == template.id
    assert review.status == ReviewStatus.PENDING.value
    assert entry["review_id"] == review.id

    # A second note reuses the same review
    client.post(
        "/api/diary/",
        headers=auth_headers(manager_user),
        json={"employee_id": collaborator_user.id, "text": "Ajudou no fechamento do mês."},
    )
    assert db_session.query(PerformanceReview).filter(
        PerformanceReview.employee_id == collaborator_user.id
    ).count() == 1


def test_diary_entry_requires_an_assigned_template(client, manager_user, collaborator_user, auth_headers):
    response = client.post(
        "/api/diary/",
        headers=auth_headers(manager_user),
        json={"employee_id": collaborator_user.id, "text": "Sem modelo atribuído."},
    )
    assert response.status_code == 422


def test_diary_listing_visibility(client, db_session, admin_user, manager_user, collaborator_user, auth_headers):
    db_session.add_all([
        DiaryEntry(
            text="Nota do gestor", employee_id=collaborator_user.id, employee_name=collaborator_user.name,
            author_id=manager_user.id, author_name=manager_user.name,
            created_at=datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc),
        ),
        DiaryEntry(
            text="Nota do RH", employee_id=collaborator_user.id, employee_name=collaborator_user.name,
            author_id=admin_user.id, author_name=admin_user.name,
            created_at=datetime(2024, 5, 31, 23, 0, tzinfo=timezone.utc),
        ),
        DiaryEntry(
            text="Mês seguinte", employee_id=collaborator_user.id, employee_name=collaborator_user.name,
            author_id=manager_user.id, author_name=manager_user.name,
            created_at=datetime(2024, 6, 1, 0, 30, tzinfo=timezone.utc),
        ),
    ])
    db_session.commit()

    as_admin = client.get("/api/diary/?period=2024-05", headers=auth_headers(admin_user)).json()
    assert [e["text"] for e in as_admin] == ["Nota do RH", "Nota do gestor"]

    as_manager = client.get("/api/diary/?period=2024-05", headers=auth_headers(manager_user)).json()
    assert [e["text"] for e in as_manager] == ["Nota do gestor"]

    as_collaborator = client.get("/api/diary/?period=2024-05", headers=auth_headers(collaborator_user)).json()
    assert as_collaborator == []
