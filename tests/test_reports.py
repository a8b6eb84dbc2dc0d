import pytest
from humance.models.performance_review import PerformanceReview, ReviewStatus
from humance.models.user import User, UserRole

PERIOD = "2024-06"


def _completed(db_session, employee, department, period=PERIOD, average=None, kpi=None, status=ReviewStatus.COMPLETED):
    review = PerformanceReview(
        employee_id=employee.id, employee_name=employee.name, employee_role=employee.role.value,
        department_id=department.id, department_name=department.name,
        period=period, status=status.value, average_score=average, kpi_score=kpi,
    )
    db_session.add(review)
    db_session.commit()
    return review


@pytest.fixture
def scored_team(db_session, manager_user, department, collaborator_user):
    _completed(db_session, collaborator_user, department, average=8.0, kpi=9)
    # Manager sits in the team; a completed review without a score still counts
    _completed(db_session, manager_user, department, average=None, kpi=None)
    return manager_user, collaborator_user


def test_leaderboard(client, admin_user, department, scored_team, auth_headers):
    manager, _ = scored_team
    response = client.get(f"/api/reports/leaderboard?period={PERIOD}", headers=auth_headers(admin_user))
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    row = rows[0]
    assert row["leader_id"] == manager.id
    assert row["average_score"] == 4.0
    assert row["kpi_score"] == 9
    # raw leader tier value, not scaled by performance
    assert row["kpi_bonus"] == 500
    assert row["total_reviews"] == 2
    assert row["team_size"] == 2


def test_leaderboard_skips_managers_without_completed_reviews(client, db_session, admin_user, department, collaborator_user, auth_headers):
    _completed(db_session, collaborator_user, department, average=9.0, status=ReviewStatus.AWAITING_APPROVAL)
    response = client.get(f"/api/reports/leaderboard?period={PERIOD}", headers=auth_headers(admin_user))
    assert response.json() == []


def test_leaderboard_sorted_by_average(client, db_session, admin_user, department, scored_team, auth_headers):
    from humance.models.department import Department
    other_manager = User(name="Olga Gerente", email="olga@humance.com.br", hashed_password="x", role=UserRole.MANAGER)
    db_session.add(other_manager)
    db_session.commit()
    other_department = Department(name="Financeiro", leader_id=other_manager.id)
    db_session.add(other_department)
    db_session.commit()
    member = User(
        name="Fábio Analista", email="fabio@humance.com.br", hashed_password="x",
        role=UserRole.COLLABORATOR, department_id=other_department.id,
    )
    db_session.add(member)
    db_session.commit()
    _completed(db_session, member, other_department, average=9.5, kpi=2)

    rows = client.get(f"/api/reports/leaderboard?period={PERIOD}", headers=auth_headers(admin_user)).json()
    assert [r["leader_name"] for r in rows] == ["Olga Gerente", "Marcos Gerente"]
    assert rows[0]["kpi_bonus"] == 0


def test_bonus_report(client, admin_user, department, scored_team, auth_headers):
    response = client.get(
        f"/api/reports/bonus?period={PERIOD}&department_id={department.id}",
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 200
    rows = response.json()
    assert [r["employee_name"] for r in rows] == ["Carla Colaboradora", "Marcos Gerente"]

    carla, marcos = rows
    assert carla["performance_bonus_percentage"] == 100
    assert carla["kpi_bonus_value"] == 300
    assert marcos["role"] == "Gerente"
    assert marcos["performance_bonus_percentage"] == 0
    assert marcos["kpi_bonus_value"] == 0


def test_bonus_report_orders_names_ignoring_accents_and_case(client, db_session, admin_user, department, auth_headers):
    for name, email in (("bruno Lima", "bruno@humance.com.br"), ("Ágata Reis", "agata@humance.com.br"), ("Carlos Dias", "carlos@humance.com.br")):
        person = User(
            name=name, email=email, hashed_password="x",
            role=UserRole.COLLABORATOR, department_id=department.id,
        )
        db_session.add(person)
        db_session.commit()
        _completed(db_session, person, department, average=7.0, kpi=6)

    rows = client.get(f"/api/reports/bonus?period={PERIOD}", headers=auth_headers(admin_user)).json()
    assert [r["employee_name"] for r in rows] == ["Ágata Reis", "bruno Lima", "Carlos Dias"]


def test_bonus_report_unknown_department(client, admin_user, scored_team, auth_headers):
    response = client.get(f"/api/reports/bonus?period={PERIOD}&department_id=9999", headers=auth_headers(admin_user))
    assert response.json() == []


def test_bonus_report_scales_with_custom_parameters(client, admin_user, department, scored_team, auth_headers):
    client.put(
        "/api/bonus-parameters/performance",
        headers=auth_headers(admin_user),
        json={"rules": [{"min_score": 0, "max_score": 10, "bonus_percentage": 50}]},
    )
    rows = client.get(f"/api/reports/bonus?period={PERIOD}", headers=auth_headers(admin_user)).json()
    carla = next(r for r in rows if r["employee_name"] == "Carla Colaboradora")
    assert carla["kpi_bonus_value"] == 150.0


def test_performance_history(client, db_session, department, collaborator_user, auth_headers):
    _completed(db_session, collaborator_user, department, period="2024-05", average=7.0)
    _completed(db_session, collaborator_user, department, period="2024-06", average=8.0)
    _completed(db_session, collaborator_user, department, period="2024-07", average=None, status=ReviewStatus.PENDING)

    response = client.get(f"/api/reports/history/{collaborator_user.id}", headers=auth_headers(collaborator_user))
    assert response.status_code == 200
    assert response.json() == [
        {"period": "2024-06", "average_score": 8.0},
        {"period": "2024-05", "average_score": 7.0},
    ]


def test_history_of_someone_else_is_forbidden(client, db_session, collaborator_user, auth_headers):
    stranger = User(name="Rita Outra", email="rita@humance.com.br", hashed_password="x", role=UserRole.COLLABORATOR)
    db_session.add(stranger)
    db_session.commit()
    response = client.get(f"/api/reports/history/{collaborator_user.id}", headers=auth_headers(stranger))
    assert response.status_code == 403


def test_status_summary_reports_missing_reviews_as_pending(client, db_session, admin_user, manager_user, department, collaborator_user, auth_headers):
    newcomer = User(
        name="Bia Nova", email="bia@humance.com.br", hashed_password="x",
        role=UserRole.COLLABORATOR, department_id=department.id,
    )
    db_session.add(newcomer)
    db_session.commit()
    _completed(db_session, collaborator_user, department, average=8.0)

    as_manager = client.get(
        f"/api/reports/status-summary?period={PERIOD}", headers=auth_headers(manager_user)
    ).json()
    assert [(r["employee_name"], r["status"]) for r in as_manager] == [
        ("Bia Nova", "Pendente"),
        ("Carla Colaboradora", "Concluída"),
    ]

    as_admin = client.get(f"/api/reports/status-summary?period={PERIOD}", headers=auth_headers(admin_user)).json()
    assert {r["employee_name"] for r in as_admin} == {"Bia Nova", "Carla Colaboradora", "Marcos Gerente"}

    as_collaborator = client.get(
        f"/api/reports/status-summary?period={PERIOD}", headers=auth_headers(collaborator_user)
    ).json()
    assert as_collaborator == []


def test_team_highlight(client, manager_user, scored_team, auth_headers):
    response = client.get(f"/api/reports/team-highlight?period={PERIOD}", headers=auth_headers(manager_user))
    assert response.status_code == 200
    assert response.json()["name"] == "Carla Colaboradora"


def test_reports_are_admin_only(client, manager_user, auth_headers):
    response = client.get(f"/api/reports/leaderboard?period={PERIOD}", headers=auth_headers(manager_user))
    assert response.status_code == 403


def test_invalid_period_is_rejected(client, admin_user, auth_headers):
    response = client.get("/api/reports/leaderboard?period=2024-13", headers=auth_headers(admin_user))
    assert response.status_code == 422


def test_employee_of_the_month_placeholder_until_hr_sets_it(client, admin_user, collaborator_user, auth_headers):
    response = client.get("/api/reports/employee-of-the-month", headers=auth_headers(collaborator_user))
    assert response.status_code == 200
    assert response.json()["name"] == "Funcionário do Mês"
    assert response.json()["reason"] == "Aguardando definição do RH."


def test_admin_sets_employee_of_the_month(client, db_session, admin_user, collaborator_user, auth_headers):
    from humance.models.audit_log import AuditLog

    payload = {
        "name": "Carla Colaboradora",
        "role": "Analista Comercial",
        "reason": "Bateu a meta de vendas do trimestre.",
        "image_url": "https://placehold.co/100x100.png",
    }
    response = client.put("/api/reports/employee-of-the-month", headers=auth_headers(admin_user), json=payload)
    assert response.status_code == 200
    assert response.json()["success"] is True

    seen = client.get("/api/reports/employee-of-the-month", headers=auth_headers(collaborator_user)).json()
    assert seen["name"] == "Carla Colaboradora"
    assert seen["image_url"] == "https://placehold.co/100x100.png"
    assert db_session.query(AuditLog).filter(AuditLog.action == "employee_of_the_month_updated").count() == 1


def test_manager_sees_team_top_review_as_employee_of_the_month(client, db_session, admin_user, manager_user, scored_team, auth_headers):
    client.put(
        "/api/reports/employee-of-the-month",
        headers=auth_headers(admin_user),
        json={"name": "Outra Pessoa", "role": "RH", "reason": "Escolha do RH."},
    )
    seen = client.get(
        f"/api/reports/employee-of-the-month?period={PERIOD}", headers=auth_headers(manager_user)
    ).json()
    assert seen["name"] == "Carla Colaboradora"


@pytest.mark.parametrize("payload", [
    {"name": "  ", "role": "Analista", "reason": "Motivo"},
    {"name": "Carla", "role": "Analista", "reason": "Motivo", "image_url": "não é url"},
])
def test_employee_of_the_month_validation(client, admin_user, auth_headers, payload):
    response = client.put("/api/reports/employee-of-the-month", headers=auth_headers(admin_user), json=payload)
    assert response.status_code == 422


def test_only_admins_set_employee_of_the_month(client, manager_user, auth_headers):
    response = client.put(
        "/api/reports/employee-of-the-month",
        headers=auth_headers(manager_user),
        json={"name": "Marcos", "role": "Gerente", "reason": "Autoindicação."},
    )
    assert response.status_code == 403
