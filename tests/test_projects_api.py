API = "/api/v1"


def test_create_requires_title(client, users, headers):
    response = client.post(f"{API}/projects", json={"description": "no title"}, headers=headers(users["member"]))
    assert response.status_code == 400


def test_create_with_unknown_client_is_404(client, users, headers):
    response = client.post(f"{API}/projects", json={"title": "X", "client_id": 42}, headers=headers(users["member"]))
    assert response.status_code == 404
    assert response.json() == {"error": "Client not found"}


def test_listing_depends_on_role(client, users, headers, project):
    for key in ("admin", "lead", "support", "tech", "member"):
        ids = [p["id"] for p in client.get(f"{API}/projects", headers=headers(users[key])).json()]
        assert ids == [project["id"]], key

    assert client.get(f"{API}/projects", headers=headers(users["outsider"])).json() == []


def test_detail_for_owner_and_members(client, users, headers, project):
    detail = client.get(f"{API}/projects/{project['id']}", headers=headers(users["member"])).json()
    assert detail["created_by_name"] == "lea"
    assert detail["members"] == []
    assert detail["access"] == {
        "is_owner": True,
        "role": "owner",
        "permissions": {"read": True, "write": True, "delete": True},
    }

    detail = client.get(f"{API}/projects/{project['id']}", headers=headers(users["support"])).json()
    assert detail["access"]["permissions"] == {"read": True, "write": False, "delete": False}


def test_detail_is_stable_without_mutation(client, users, headers, project):
    first = client.get(f"{API}/projects/{project['id']}", headers=headers(users["admin"]))
    second = client.get(f"{API}/projects/{project['id']}", headers=headers(users["admin"]))
    assert first.status_code == 200
    assert first.json() == second.json()


def test_outsider_is_denied(client, users, headers, project):
    response = client.get(f"{API}/projects/{project['id']}", headers=headers(users["outsider"]))
    assert response.status_code == 403
    assert response.json() == {"error": "Access denied to this project"}


def test_missing_project_is_404_for_every_role(client, users, headers):
    for key in ("admin", "support", "outsider"):
        response = client.get(f"{API}/projects/9999", headers=headers(users[key]))
        assert response.status_code == 404
        assert response.json() == {"error": "Project not found"}


def test_update_is_owner_or_admin_only(client, users, headers, project):
    url = f"{API}/projects/{project['id']}"
    for key in ("lead", "support", "tech"):
        assert client.put(url, json={"title": "Nope"}, headers=headers(users[key])).status_code == 403

    response = client.put(url, json={"title": "Gymnase 2", "status": "on_hold"}, headers=headers(users["admin"]))
    assert response.status_code == 200
    assert response.json()["title"] == "Gymnase 2"
    assert response.json()["status"] == "on_hold"

    response = client.put(url, json={"status": "unknown"}, headers=headers(users["member"]))
    assert response.status_code == 400


def test_delete_is_owner_only_and_cascades(client, users, headers, project, task):
    url = f"{API}/projects/{project['id']}"
    response = client.delete(url, headers=headers(users["lead"]))
    assert response.status_code == 403
    assert response.json() == {"error": "Only project owner can delete the project"}

    assert client.delete(url, headers=headers(users["member"])).status_code == 204
    assert client.get(url, headers=headers(users["admin"])).status_code == 404
    assert client.get(f"{API}/tasks/{task['id']}", headers=headers(users["admin"])).status_code == 404


def test_add_member_with_recorded_permissions(client, users, headers, project):
    url = f"{API}/projects/{project['id']}/members"
    response = client.post(
        url,
        json={"username": "max", "role": "viewer", "permissions": {"write": False}},
        headers=headers(users["member"]),
    )
    assert response.status_code == 201
    assert response.json()["permissions"] == {"read": True, "write": False, "delete": False}

    # maintenant membre : lecture ok, écriture refusée
    outsider = headers(users["outsider"])
    detail = client.get(f"{API}/projects/{project['id']}", headers=outsider).json()
    assert detail["access"]["role"] == "viewer"
    assert [m["username"] for m in detail["members"]] == ["max"]
    denied = client.post(f"{API}/tasks/project/{project['id']}", json={"title": "T"}, headers=outsider)
    assert denied.status_code == 403

    duplicate = client.post(url, json={"username": "max"}, headers=headers(users["member"]))
    assert duplicate.status_code == 400
    assert duplicate.json() == {"error": "User is already a member of this project"}


def test_member_role_label_does_not_grant_project_edit(client, users, headers, project):
    url = f"{API}/projects/{project['id']}"
    client.post(
        f"{url}/members",
        json={"username": "max", "role": "admin", "permissions": {"read": True, "write": False, "delete": False}},
        headers=headers(users["member"]),
    )
    outsider = headers(users["outsider"])
    assert client.get(url, headers=outsider).json()["access"]["role"] == "admin"

    response = client.put(url, json={"title": "Renommé"}, headers=outsider)
    assert response.status_code == 403
    assert client.get(url, headers=outsider).json()["title"] == project["title"]


def test_add_member_rules(client, users, headers, project):
    url = f"{API}/projects/{project['id']}/members"
    assert client.post(url, json={"username": "max"}, headers=headers(users["lead"])).status_code == 403
    missing = client.post(url, json={"username": "ghost"}, headers=headers(users["member"]))
    assert missing.status_code == 404


def test_member_write_permission_allows_task_creation(client, users, headers, project):
    client.post(
        f"{API}/projects/{project['id']}/members",
        json={"username": "max", "permissions": {"write": True}},
        headers=headers(users["member"]),
    )
    response = client.post(
        f"{API}/tasks/project/{project['id']}", json={"title": "T"}, headers=headers(users["outsider"])
    )
    assert response.status_code == 201


def test_activity_log_records_mutations(client, users, headers, project, task):
    client.put(f"{API}/projects/{project['id']}", json={"budget": 2000}, headers=headers(users["member"]))
    entries = client.get(f"{API}/projects/{project['id']}/activity", headers=headers(users["support"])).json()
    actions = {(e["entity_type"], e["action"]) for e in entries}
    assert {("project", "created"), ("task", "created"), ("project", "updated")} <= actions
    updated = next(e for e in entries if e["entity_type"] == "project" and e["action"] == "updated")
    assert updated["changes"] == {"budget": 2000.0}
    assert updated["username"] == "lea"
