from sqlmodel import select

from planitech.db.models.tasks import TaskDependency

API = "/api/v1"


def create_task(client, headers, user, project_id, **fields):
    fields.setdefault("title", "Tâche")
    response = client.post(f"{API}/tasks/project/{project_id}", json=fields, headers=headers(user))
    assert response.status_code == 201, response.text
    return response.json()


def test_created_task_carries_names(client, users, headers, project, task):
    assert task["project_id"] == project["id"]
    assert task["assigned_to_name"] == "tom"
    assert task["created_by_name"] == "admin"
    assert task["project_title"] == project["title"]
    assert task["priority"] == "medium"
    assert task["status"] == "not_started"
    assert task["dependencies"] == []


def test_read_only_roles_cannot_write_tasks(client, users, headers, project, task):
    for key in ("tech", "support"):
        user = headers(users[key])
        assert client.post(f"{API}/tasks/project/{project['id']}", json={"title": "T"}, headers=user).status_code == 403
        assert client.put(f"{API}/tasks/{task['id']}", json={"progress": 50}, headers=user).status_code == 403
        assert client.delete(f"{API}/tasks/{task['id']}", headers=user).status_code == 403
        # lecture autorisée
        assert client.get(f"{API}/tasks/{task['id']}", headers=user).status_code == 200


def test_partial_update(client, users, headers, task):
    response = client.put(
        f"{API}/tasks/{task['id']}",
        json={"progress": 40, "status": "in_progress"},
        headers=headers(users["lead"]),
    )
    assert response.status_code == 200
    body = response.json()
    assert (body["progress"], body["status"], body["title"]) == (40, "in_progress", task["title"])

    bad = client.put(f"{API}/tasks/{task['id']}", json={"progress": 150}, headers=headers(users["lead"]))
    assert bad.status_code == 400


def test_parent_must_be_in_same_project(client, users, headers, project, task):
    other = client.post(f"{API}/projects", json={"title": "Autre"}, headers=headers(users["admin"])).json()
    foreign = create_task(client, headers, users["admin"], other["id"])

    child = create_task(client, headers, users["admin"], project["id"], parent_task_id=task["id"])
    assert child["parent_task_title"] == task["title"]

    response = client.post(
        f"{API}/tasks/project/{project['id']}",
        json={"title": "Orpheline", "parent_task_id": foreign["id"]},
        headers=headers(users["admin"]),
    )
    assert response.status_code == 400


def test_parent_chain_cannot_loop(client, users, headers, project, task):
    admin = users["admin"]
    child = create_task(client, headers, admin, project["id"], parent_task_id=task["id"])
    grandchild = create_task(client, headers, admin, project["id"], parent_task_id=child["id"])

    for parent in (child, grandchild):
        response = client.put(
            f"{API}/tasks/{task['id']}", json={"parent_task_id": parent["id"]}, headers=headers(admin)
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Circular parent relationship"}

    itself = client.put(f"{API}/tasks/{task['id']}", json={"parent_task_id": task["id"]}, headers=headers(admin))
    assert itself.json() == {"error": "A task cannot be its own parent"}

    # re-parenter sur une branche sans lien reste permis
    sibling = create_task(client, headers, admin, project["id"])
    moved = client.put(f"{API}/tasks/{grandchild['id']}", json={"parent_task_id": sibling["id"]}, headers=headers(admin))
    assert moved.status_code == 200
    assert moved.json()["parent_task_id"] == sibling["id"]


def test_unknown_assignee_is_rejected(client, users, headers, project):
    response = client.post(
        f"{API}/tasks/project/{project['id']}",
        json={"title": "T", "assigned_to": 9999},
        headers=headers(users["admin"]),
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Assigned user not found"}


def test_dependency_in_same_project(client, users, headers, project, task):
    second = create_task(client, headers, users["admin"], project["id"], title="Pose")
    response = client.post(
        f"{API}/tasks/{second['id']}/dependencies",
        json={"depends_on_task_id": task["id"], "lag": 2},
        headers=headers(users["admin"]),
    )
    assert response.status_code == 201
    assert response.json()["dependency_type"] == "finish_to_start"

    listed = client.get(f"{API}/tasks/project/{project['id']}", headers=headers(users["member"])).json()
    deps = {t["id"]: t["dependencies"] for t in listed}
    assert deps[task["id"]] == []
    assert [(d["depends_on_task_id"], d["depends_on_title"], d["lag"]) for d in deps[second["id"]]] == [
        (task["id"], task["title"], 2)
    ]

    duplicate = client.post(
        f"{API}/tasks/{second['id']}/dependencies",
        json={"depends_on_task_id": task["id"]},
        headers=headers(users["admin"]),
    )
    assert duplicate.status_code == 400
    assert duplicate.json() == {"error": "Dependency already exists"}


def test_cross_project_dependency_is_rejected_without_insert(client, session, users, headers, task):
    other = client.post(f"{API}/projects", json={"title": "Autre"}, headers=headers(users["admin"])).json()
    foreign = create_task(client, headers, users["admin"], other["id"])

    response = client.post(
        f"{API}/tasks/{task['id']}/dependencies",
        json={"depends_on_task_id": foreign["id"]},
        headers=headers(users["admin"]),
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Tasks must belong to the same project"}
    assert session.exec(select(TaskDependency)).all() == []


def test_self_dependency_is_rejected(client, users, headers, task):
    response = client.post(
        f"{API}/tasks/{task['id']}/dependencies",
        json={"depends_on_task_id": task["id"]},
        headers=headers(users["admin"]),
    )
    assert response.status_code == 400


def test_delete_task_removes_dependencies(client, session, users, headers, project, task):
    second = create_task(client, headers, users["admin"], project["id"], title="Pose")
    client.post(
        f"{API}/tasks/{second['id']}/dependencies",
        json={"depends_on_task_id": task["id"]},
        headers=headers(users["admin"]),
    )
    assert client.delete(f"{API}/tasks/{task['id']}", headers=headers(users["member"])).status_code == 204
    assert client.get(f"{API}/tasks/{task['id']}", headers=headers(users["admin"])).status_code == 404
    assert session.exec(select(TaskDependency)).all() == []


def test_my_tasks_lists_open_assignments(client, users, headers, project, task):
    done = create_task(client, headers, users["admin"], project["id"], title="Fini", assigned_to=users["tech"].id)
    client.put(f"{API}/tasks/{done['id']}", json={"status": "completed"}, headers=headers(users["admin"]))

    mine = client.get(f"{API}/users/me/tasks", headers=headers(users["tech"])).json()
    assert [t["id"] for t in mine] == [task["id"]]
