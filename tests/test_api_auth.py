"""Tests for registration, login and the profile endpoints."""


class TestRegister:
    def test_register_returns_token_and_user(self, client):
        response = client.post(
            "/auth/register",
            json={"email": "  Sara@Example.com ", "password": "correct-horse-9", "display_name": "Sara"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "sara@example.com"
        assert data["user"]["total_xp"] == 0
        assert data["user"]["daily_goal_xp"] == 50
        assert "zabaan_auth" in response.cookies

    def test_duplicate_email(self, client, register_user):
        register_user("dup@example.com")
        response = client.post("/auth/register", json={"email": "DUP@example.com", "password": "correct-horse-9"})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_invalid_email(self, client):
        response = client.post("/auth/register", json={"email": "not-an-email", "password": "correct-horse-9"})
        assert response.status_code == 400

    def test_short_password(self, client):
        response = client.post("/auth/register", json={"email": "a@example.com", "password": "short"})
        assert response.status_code == 422

    def test_unknown_timezone(self, client):
        response = client.post(
            "/auth/register",
            json={"email": "a@example.com", "password": "correct-horse-9", "timezone": "Mars/Olympus"},
        )
        assert response.status_code == 400


class TestLogin:
    def test_login_with_bearer_token(self, client, register_user):
        register_user("login@example.com")
        client.cookies.clear()

        response = client.post("/auth/login", json={"email": "login@example.com", "password": "correct-horse-9"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        client.cookies.clear()
        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "login@example.com"

    def test_cookie_authenticates(self, client, register_user):
        register_user("cookie@example.com")
        assert client.get("/auth/me").json()["email"] == "cookie@example.com"

    def test_wrong_password(self, client, register_user):
        register_user("login@example.com")
        response = client.post("/auth/login", json={"email": "login@example.com", "password": "wrong-password"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid email or password", "code": "UNAUTHENTICATED"}

    def test_logout_clears_cookie(self, client, register_user):
        register_user("bye@example.com")
        client.post("/auth/logout")
        assert client.get("/auth/me").status_code == 401

    def test_bad_bearer_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401


class TestProfile:
    def test_update_profile(self, client, auth_headers):
        response = client.patch(
            "/auth/me", json={"display_name": "  Dara ", "timezone": "Asia/Tehran"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["display_name"] == "Dara"
        assert response.json()["timezone"] == "Asia/Tehran"

    def test_reject_unknown_timezone(self, client, auth_headers):
        response = client.patch("/auth/me", json={"timezone": "Nowhere/Special"}, headers=auth_headers)
        assert response.status_code == 400


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
