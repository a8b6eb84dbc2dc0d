import pytest
from humance.models.kpi import KpiAssessment, KpiModel
from humance.models.performance_review import PerformanceReview, ReviewStatus
from humance.models.user import User, UserRole

PERIOD = "2024-06"

INDICATORS = [
    {"indicator": "Vendas", "weight": 3, "goal": 100, "type": "accelerator", "condition": "above"},
    {"indicator": "Reclamações", "weight": 2, "goal": 5, "type": "detractor", "condition": "below"},
]


@pytest.fixture
def kpi_model(db_session, department):
    model = KpiModel(department_id=department.id, indicators=INDICATORS)
    db_session.add(model)
    db_session.commit()
    return model


def _review(db_session, employee, manager, department, template, status):
    review = PerformanceReview(
        employee_id=employee.id, employee_name=employee.name, employee_role=employee.role.value,
        manager_id=manager.id, department_id=department.id, department_name=department.name,
        template_id=template.id, period=PERIOD, status=status.value,
        scores={"0": 8, "1": 8, "2": 8} if status != ReviewStatus.PENDING else None,
        average_score=8.0 if status != ReviewStatus.PENDING else None,
    )
    db_session.add(review)
    db_session.commit()
    return review


@pytest.fixture
def reviews(db_session, manager_user, department, collaborator_user, template):
    second = User(
        name="Diego Vendedor", email="diego@humance.com.br", hashed_password="x",
        role=UserRole.COLLABORATOR, department_id=department.id,
    )
    db_session.add(second)
    db_session.commit()
    awaiting = _review(db_session, collaborator_user, manager_user, department, template, ReviewStatus.AWAITING_APPROVAL)
    pending = _review(db_session, second, manager_user, department, template, ReviewStatus.PENDING)
    return awaiting, pending


def _process(client, admin, department, auth_headers, results, period=PERIOD):
    return client.post(
        "/api/kpi/process",
        headers=auth_headers(admin),
        json={"department_id": department.id, "period": period, "results": results},
    )


def test_processing_scores_and_completes_reviews(client, db_session, admin_user, department, kpi_model, reviews, auth_headers):
    awaiting, pending = reviews
    response = _process(client, admin_user, department, auth_headers, {"0": 120, "1": 7})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["kpi_score"] == 1
    assert body["reviews_affected_count"] == 2

    db_session.expire_all()
    awaiting = db_session.get(PerformanceReview, awaiting.id)
    pending = db_session.get(PerformanceReview, pending.id)
    assert awaiting.kpi_score == 1
    assert awaiting.status == ReviewStatus.COMPLETED.value
    assert awaiting.completed_at is not None
    assert pending.kpi_score == 1
    assert pending.status == ReviewStatus.PENDING.value

    assessment = db_session.query(KpiAssessment).one()
    assert assessment.results == {"0": 120, "1": 7}
    assert assessment.indicators == INDICATORS
    assert assessment.department_name == "Comercial"


def test_reprocessing_overwrites_the_assessment(client, db_session, admin_user, department, kpi_model, reviews, auth_headers):
    _process(client, admin_user, department, auth_headers, {"0": 120, "1": 7})
    second = _process(client, admin_user, department, auth_headers, {"0": 120, "1": 3})
    assert second.json()["kpi_score"] == 3

    assert db_session.query(KpiAssessment).count() == 1
    db_session.expire_all()
    scores = {r.kpi_score for r in db_session.query(PerformanceReview).filter(PerformanceReview.period == PERIOD)}
    assert scores == {3}

    history = client.get(f"/api/kpi/assessments?period={PERIOD}", headers=auth_headers(admin_user)).json()
    assert len(history) == 1
    assert history[0]["kpi_score"] == 3


def test_missing_results_score_nothing(client, admin_user, department, kpi_model, reviews, auth_headers):
    response = _process(client, admin_user, department, auth_headers, {"0": None})
    assert response.json()["kpi_score"] == 0


def test_no_matching_reviews_persists_nothing(client, db_session, admin_user, department, kpi_model, auth_headers):
    response = _process(client, admin_user, department, auth_headers, {"0": 120, "1": 3}, period="2030-01")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["kpi_score"] == 3
    assert body["reviews_affected_count"] == 0
    assert db_session.query(KpiAssessment).count() == 0


def test_processing_requires_a_kpi_model(client, admin_user, department, auth_headers):
    response = _process(client, admin_user, department, auth_headers, {"0": 1})
    assert response.status_code == 422


def test_delete_assessment_clears_scores_but_keeps_status(client, db_session, admin_user, department, kpi_model, reviews, auth_headers):
    awaiting, _ = reviews
    _process(client, admin_user, department, auth_headers, {"0": 120, "1": 7})
    assessment_id = db_session.query(KpiAssessment.id).scalar()

    response = client.delete(f"/api/kpi/assessments/{assessment_id}", headers=auth_headers(admin_user))
    assert response.status_code == 200
    assert response.json()["data"] == {"reviews_affected_count": 2}

    db_session.expire_all()
    assert db_session.query(KpiAssessment).count() == 0
    review = db_session.get(PerformanceReview, awaiting.id)
    assert review.kpi_score is None
    assert review.status == ReviewStatus.COMPLETED.value


def test_delete_assessment_clears_reviews_opened_after_processing(client, db_session, admin_user, manager_user, department, kpi_model, reviews, template, auth_headers):
    _process(client, admin_user, department, auth_headers, {"0": 120, "1": 7})
    assessment_id = db_session.query(KpiAssessment.id).scalar()

    latecomer = User(
        name="Lia Recém-chegada", email="lia@humance.com.br", hashed_password="x",
        role=UserRole.COLLABORATOR, department_id=department.id,
    )
    db_session.add(latecomer)
    db_session.commit()
    late_review = _review(db_session, latecomer, manager_user, department, template, ReviewStatus.AWAITING_APPROVAL)
    late_review.kpi_score = 7
    db_session.commit()

    response = client.delete(f"/api/kpi/assessments/{assessment_id}", headers=auth_headers(admin_user))
    assert response.json()["data"] == {"reviews_affected_count": 3}

    db_session.expire_all()
    late_review = db_session.get(PerformanceReview, late_review.id)
    assert late_review.kpi_score is None
    assert late_review.status == ReviewStatus.AWAITING_APPROVAL.value


def test_delete_assessment_leaves_other_departments_and_periods(client, db_session, admin_user, manager_user, department, collaborator_user, kpi_model, reviews, template, auth_headers):
    from humance.models.department import Department

    _process(client, admin_user, department, auth_headers, {"0": 120, "1": 7})
    assessment_id = db_session.query(KpiAssessment.id).scalar()

    earlier = PerformanceReview(
        employee_id=collaborator_user.id, employee_name=collaborator_user.name,
        manager_id=manager_user.id, department_id=department.id, department_name=department.name,
        template_id=template.id, period="2024-05", status=ReviewStatus.COMPLETED.value,
        average_score=7.0, kpi_score=4,
    )
    other_department = Department(name="Financeiro")
    db_session.add_all([earlier, other_department])
    db_session.commit()
    analyst = User(
        name="Fábio Analista", email="fabio@humance.com.br", hashed_password="x",
        role=UserRole.COLLABORATOR, department_id=other_department.id,
    )
    db_session.add(analyst)
    db_session.commit()
    elsewhere = PerformanceReview(
        employee_id=analyst.id, employee_name=analyst.name,
        department_id=other_department.id, department_name=other_department.name,
        period=PERIOD, status=ReviewStatus.COMPLETED.value, average_score=9.0, kpi_score=6,
    )
    db_session.add(elsewhere)
    db_session.commit()

    response = client.delete(f"/api/kpi/assessments/{assessment_id}", headers=auth_headers(admin_user))
    assert response.json()["data"] == {"reviews_affected_count": 2}

    db_session.expire_all()
    assert db_session.get(PerformanceReview, earlier.id).kpi_score == 4
    assert db_session.get(PerformanceReview, elsewhere.id).kpi_score == 6


def test_delete_unknown_assessment(client, admin_user, auth_headers):
    response = client.delete("/api/kpi/assessments/9999", headers=auth_headers(admin_user))
    assert response.status_code == 404


def test_kpi_model_upsert(client, db_session, admin_user, department, auth_headers):
    headers = auth_headers(admin_user)
    first = client.put(
        "/api/kpi/models",
        headers=headers,
        json={"department_id": department.id, "indicators": INDICATORS},
    )
    assert first.status_code == 200
    second = client.put(
        "/api/kpi/models",
        headers=headers,
        json={"department_id": department.id, "indicators": INDICATORS[:1]},
    )
    assert second.json()["data"]["department_name"] == "Comercial"
    assert db_session.query(KpiModel).count() == 1

    fetched = client.get(f"/api/kpi/models/{department.id}", headers=headers).json()
    assert len(fetched["indicators"]) == 1


def test_kpi_model_rejects_non_positive_weight(client, admin_user, department, auth_headers):
    bad = dict(INDICATORS[0], weight=0)
    response = client.put(
        "/api/kpi/models",
        headers=auth_headers(admin_user),
        json={"department_id": department.id, "indicators": [bad]},
    )
    assert response.status_code == 422


def test_only_admins_process_kpis(client, manager_user, department, kpi_model, auth_headers):
    response = _process(client, manager_user, department, auth_headers, {"0": 120})
    assert response.status_code == 403
