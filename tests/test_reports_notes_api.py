API = "/api/v1"

REPORT = {"title": "Intervention tableau", "time_spent": 2.5, "work_done": "Remplacement disjoncteur"}


def create_report(client, headers, user, task_id, **overrides):
    return client.post(f"{API}/intervention-reports", json={**REPORT, "task_id": task_id, **overrides},
                       headers=headers(user))


# -----------------------------
# Intervention reports
# -----------------------------

def test_technician_reports_on_assigned_task(client, users, headers, task):
    response = create_report(client, headers, users["tech"], task["id"])
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "draft"
    assert body["technician_name"] == "tom"
    assert body["task_title"] == task["title"]


def test_technician_cannot_report_on_unassigned_task(client, users, headers, project):
    other = client.post(
        f"{API}/tasks/project/{project['id']}", json={"title": "Libre"}, headers=headers(users["admin"])
    ).json()
    response = create_report(client, headers, users["tech"], other["id"])
    assert response.status_code == 403
    assert response.json() == {"error": "You can only create reports for tasks assigned to you"}


def test_only_technicians_create_reports(client, users, headers, task):
    assert create_report(client, headers, users["admin"], task["id"]).status_code == 403


def test_report_validation(client, users, headers, task):
    assert create_report(client, headers, users["tech"], task["id"], time_spent=0).status_code == 400
    assert create_report(client, headers, users["tech"], 9999).status_code == 404


def test_report_listings_by_role(client, users, headers, task, make_user):
    create_report(client, headers, users["tech"], task["id"])

    for key in ("admin", "lead", "support"):
        assert len(client.get(f"{API}/intervention-reports", headers=headers(users[key])).json()) == 1
    assert client.get(f"{API}/intervention-reports", headers=headers(users["tech"])).status_code == 403
    assert len(client.get(f"{API}/intervention-reports/my-reports", headers=headers(users["tech"])).json()) == 1

    # un autre technicien ne voit pas les rapports de tom sur la tâche
    other_tech = make_user("ines", "technicien")
    url = f"{API}/intervention-reports/task/{task['id']}"
    assert client.get(url, headers=headers(other_tech)).json() == []
    assert len(client.get(url, headers=headers(users["lead"])).json()) == 1


def test_report_update_rules(client, users, headers, task, make_user):
    report = create_report(client, headers, users["tech"], task["id"]).json()
    url = f"{API}/intervention-reports/{report['id']}"

    other_tech = make_user("ines", "technicien")
    assert client.put(url, json={"title": "X"}, headers=headers(other_tech)).status_code == 403

    invalid = client.put(url, json={"status": "archived"}, headers=headers(users["tech"]))
    assert invalid.status_code == 400
    assert invalid.json() == {"error": "Invalid status"}

    response = client.put(url, json={"status": "submitted"}, headers=headers(users["tech"]))
    assert response.status_code == 200
    assert response.json()["status"] == "submitted"

    approved = client.put(url, json={"status": "approved"}, headers=headers(users["lead"]))
    assert approved.json()["status"] == "approved"


def test_report_delete_admin_or_author(client, users, headers, task):
    first = create_report(client, headers, users["tech"], task["id"]).json()
    second = create_report(client, headers, users["tech"], task["id"]).json()

    assert client.delete(f"{API}/intervention-reports/{first['id']}", headers=headers(users["lead"])).status_code == 403
    assert client.delete(f"{API}/intervention-reports/{first['id']}", headers=headers(users["tech"])).status_code == 204
    assert client.delete(f"{API}/intervention-reports/{second['id']}", headers=headers(users["admin"])).status_code == 204
    assert client.delete(f"{API}/intervention-reports/{second['id']}", headers=headers(users["admin"])).status_code == 404


# -----------------------------
# Task notes
# -----------------------------

def test_notes_by_role(client, users, headers, project, task):
    note = {"task_id": task["id"], "content": "Compteur coupé", "time_spent": 0.5}

    response = client.post(f"{API}/task-notes", json=note, headers=headers(users["tech"]))
    assert response.status_code == 201
    assert response.json()["username"] == "tom"

    assert client.post(f"{API}/task-notes", json=note, headers=headers(users["lead"])).status_code == 201
    support = client.post(f"{API}/task-notes", json=note, headers=headers(users["support"]))
    assert support.status_code == 403
    assert support.json() == {"error": "Insufficient privileges to add notes"}

    unassigned = client.post(
        f"{API}/tasks/project/{project['id']}", json={"title": "Libre"}, headers=headers(users["admin"])
    ).json()
    denied = client.post(
        f"{API}/task-notes", json={**note, "task_id": unassigned["id"]}, headers=headers(users["tech"])
    )
    assert denied.status_code == 403

    listed = client.get(f"{API}/task-notes/task/{task['id']}", headers=headers(users["support"])).json()
    assert len(listed) == 2


def test_note_edit_and_delete_by_author_or_admin(client, users, headers, task):
    note = client.post(
        f"{API}/task-notes",
        json={"task_id": task["id"], "content": "Premier passage"},
        headers=headers(users["tech"]),
    ).json()
    url = f"{API}/task-notes/{note['id']}"

    forbidden = client.put(url, json={"content": "Modifié"}, headers=headers(users["lead"]))
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "You can only edit your own notes"}

    updated = client.put(url, json={"content": "Second passage", "time_spent": 1}, headers=headers(users["tech"]))
    assert updated.json()["content"] == "Second passage"

    assert client.put(url, json={"content": ""}, headers=headers(users["tech"])).status_code == 400
    assert client.delete(url, headers=headers(users["admin"])).status_code == 204
    assert client.delete(url, headers=headers(users["admin"])).status_code == 404
