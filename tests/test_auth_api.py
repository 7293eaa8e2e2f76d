from conftest import PASSWORD

API = "/api/v1"


def test_register_returns_token_and_member_role(client):
    response = client.post(f"{API}/auth/register", json={
        "username": "nina",
        "email": "nina@test.local",
        "password": "supersecret",
        "first_name": "Nina",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User created successfully"
    assert body["token"]
    assert body["expires_in"] == 24 * 3600
    assert body["user"]["role"] == "member"
    assert "hashed_password" not in body["user"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "nina"


def test_register_duplicate_is_rejected(client, users):
    response = client.post(f"{API}/auth/register", json={
        "username": "tom",
        "email": "new@test.local",
        "password": "supersecret",
    })
    assert response.status_code == 400
    assert response.json() == {"error": "Username or email already exists"}


def test_register_missing_fields_is_a_400(client):
    response = client.post(f"{API}/auth/register", json={"username": "x"})
    assert response.status_code == 400
    assert "error" in response.json()


def test_login_by_username_or_email(client, users):
    for login in ("tom", "tom@test.local"):
        response = client.post(f"{API}/auth/login", json={"username": login, "password": PASSWORD})
        assert response.status_code == 200, response.text
        assert response.json()["user"]["role"] == "technicien"


def test_login_with_bad_password(client, users):
    response = client.post(f"{API}/auth/login", json={"username": "tom", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_protected_route_without_token(client):
    response = client.get(f"{API}/projects")
    assert response.status_code == 401
    assert response.json() == {"error": "Access token required"}


def test_protected_route_with_invalid_token(client):
    response = client.get(f"{API}/projects", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid or expired token"}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
