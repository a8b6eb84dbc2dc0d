from humance.models.review_template import TemplateAssignment


def test_create_and_list_templates(client, admin_user, manager_user, auth_headers):
    headers = auth_headers(admin_user)
    created = client.post(
        "/api/templates/",
        headers=headers,
        json={"name": "Avaliação Trimestral", "items": [{"text": "Pontualidade"}, {"text": "Qualidade"}]},
    )
    assert created.status_code == 201
    template_id = created.json()["data"]["id"]

    assigned = client.post(
        "/api/templates/assign",
        headers=headers,
        json={"template_id": template_id, "manager_ids": [manager_user.id, manager_user.id]},
    )
    assert assigned.status_code == 200
    assert assigned.json()["data"] == {"created_count": 1}

    templates = client.get("/api/templates/", headers=headers).json()
    assert templates[0]["assigned_managers"] == [{"id": manager_user.id, "name": "Marcos Gerente"}]

    mine = client.get("/api/templates/assigned", headers=auth_headers(manager_user)).json()
    assert [t["name"] for t in mine] == ["Avaliação Trimestral"]


def test_reassigning_is_a_no_op(client, db_session, admin_user, manager_user, template, auth_headers):
    response = client.post(
        "/api/templates/assign",
        headers=auth_headers(admin_user),
        json={"template_id": template.id, "manager_ids": [manager_user.id]},
    )
    assert response.json()["data"] == {"created_count": 0}
    assert db_session.query(TemplateAssignment).count() == 1


def test_assign_only_to_managers(client, admin_user, template, auth_headers):
    response = client.post(
        "/api/templates/assign",
        headers=auth_headers(admin_user),
        json={"template_id": template.id, "manager_ids": [admin_user.id]},
    )
    assert response.status_code == 422


def test_template_validation(client, admin_user, auth_headers):
    no_items = client.post(
        "/api/templates/",
        headers=auth_headers(admin_user),
        json={"name": "Vazio", "items": []},
    )
    assert no_items.status_code == 422

    short_name = client.post(
        "/api/templates/",
        headers=auth_headers(admin_user),
        json={"name": "AB", "items": [{"text": "Pontualidade"}]},
    )
    assert short_name.status_code == 422


def test_update_and_delete_template(client, admin_user, template, auth_headers):
    headers = auth_headers(admin_user)
    updated = client.put(
        f"/api/templates/{template.id}",
        headers=headers,
        json={"name": "Avaliação Mensal v2", "items": [{"text": "Comunicação"}]},
    )
    assert updated.status_code == 200
    assert len(updated.json()["data"]["items"]) == 1

    deleted = client.delete(f"/api/templates/{template.id}", headers=headers)
    assert deleted.status_code == 200
    assert client.get("/api/templates/", headers=headers).json() == []
