from gello.config import get_settings
from gello.exceptions import DataServiceError

from tests.conftest import csrf_headers, make_token


def _register(client, email="new@example.com", password="s3cret-pass", display_name="Newbie"):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "display_name": display_name},
        headers=csrf_headers(client),
    )


class TestRegister:
    def test_creates_member_profile_and_sets_cookies(self, client, db):
        response = _register(client)

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["role"] == "member"
        assert user["total_points"] == 0
        assert db.row("users", user["id"])["email"] == "new@example.com"
        settings = get_settings()
        assert settings.access_token_cookie in response.cookies
        assert settings.refresh_token_cookie in response.cookies

    def test_cookie_attributes(self, client):
        response = _register(client)

        set_cookies = response.headers.get_list("set-cookie")
        access = next(c for c in set_cookies if c.startswith("sb-access-token="))
        refresh = next(c for c in set_cookies if c.startswith("sb-refresh-token="))
        assert "HttpOnly" in access
        assert "Max-Age=3600" in access
        assert "SameSite=lax" in access
        assert "Path=/" in access
        assert "Max-Age=604800" in refresh

    def test_duplicate_email(self, client, member):
        response = _register(client, email=member["email"])

        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_user"

    def test_short_password(self, client):
        response = _register(client, password="short")
        assert response.status_code == 400

    def test_profile_failure_removes_auth_user(self, client, db, fake_auth):
        original_insert = db.insert

        async def failing_insert(table, values):
            if table == "users":
                raise DataServiceError("insert failed", service_code="23505")
            return await original_insert(table, values)

        db.insert = failing_insert
        response = _register(client)

        assert response.status_code == 502
        assert len(fake_auth.deleted) == 1
        assert fake_auth.accounts == {}


class TestLoginAndSession:
    def test_login_then_session_via_cookie(self, client, member, fake_auth):
        fake_auth.add_account(member["email"], "correct-horse", member["id"])

        login = client.post(
            "/api/auth/login",
            json={"email": member["email"], "password": "correct-horse"},
            headers=csrf_headers(client),
        )
        assert login.status_code == 200
        assert login.json()["user"]["id"] == member["id"]

        # The access cookie set by login authenticates the next request
        session = client.get("/api/auth/session")
        assert session.status_code == 200
        assert session.json()["user"]["email"] == member["email"]

    def test_wrong_password(self, client, member, fake_auth):
        fake_auth.add_account(member["email"], "correct-horse", member["id"])

        response = client.post(
            "/api/auth/login",
            json={"email": member["email"], "password": "battery-staple"},
            headers=csrf_headers(client),
        )

        assert response.status_code == 401
        assert response.json()["error"] == "invalid_credentials"

    def test_session_requires_auth(self, client):
        response = client.get("/api/auth/session")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_expired_token(self, client, member):
        response = client.get(
            "/api/auth/session", headers={"Authorization": f"Bearer {make_token(member['id'], expires_in=-60)}"}
        )
        assert response.status_code == 401

    def test_token_with_wrong_audience(self, client, member):
        token = make_token(member["id"], aud="someone-else")
        response = client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_unknown_profile(self, client):
        token = make_token("00000000-0000-0000-0000-000000000000")
        response = client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestRefreshAndLogout:
    def test_refresh_rotates_session(self, client, member, fake_auth):
        fake_auth.add_account(member["email"], "correct-horse", member["id"])
        client.post(
            "/api/auth/login",
            json={"email": member["email"], "password": "correct-horse"},
            headers=csrf_headers(client),
        )

        response = client.post("/api/auth/refresh", headers=csrf_headers(client))

        assert response.status_code == 200
        assert response.json()["user"]["id"] == member["id"]

    def test_refresh_without_cookie(self, client):
        response = client.post("/api/auth/refresh", headers=csrf_headers(client))
        assert response.status_code == 401

    def test_logout_clears_cookies(self, client, member, fake_auth):
        fake_auth.add_account(member["email"], "correct-horse", member["id"])
        client.post(
            "/api/auth/login",
            json={"email": member["email"], "password": "correct-horse"},
            headers=csrf_headers(client),
        )

        response = client.post("/api/auth/logout", headers=csrf_headers(client))

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert len(fake_auth.signed_out) == 1
        assert client.get("/api/auth/session").status_code == 401
