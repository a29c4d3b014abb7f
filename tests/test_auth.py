# =============================================================================
# tests/test_auth.py - Passwords, tokens, role guards and auth routes
# =============================================================================

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import patch

from studentpath.core.auth import create_access_token, decode_token, hash_password, verify_password
from studentpath.schemas.schemas import UserRole


# =============================================================================
# Helpers
# =============================================================================

class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_malformed_hash_is_rejected(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:

    def test_round_trip(self):
        payload = decode_token(create_access_token({"id": 42, "role": "student"}))
        assert payload["id"] == 42
        assert payload["role"] == "student"

    def test_expired_token(self):
        token = create_access_token({"id": 1, "role": "college"}, expires_delta=timedelta(seconds=-5))
        assert decode_token(token) is None

    def test_garbage_token(self):
        assert decode_token("not.a.jwt") is None


# =============================================================================
# Role guards
# =============================================================================

class TestRoleGuards:

    def test_no_session_is_401(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_invalid_bearer_is_401(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer junk"})
        assert response.status_code == 401

    def test_me_returns_session_user(self, client, login_as):
        login_as(UserRole.student, user_id=5, college_id=2)
        body = client.get("/api/auth/me").json()
        assert body["id"] == 5
        assert body["role"] == "student"
        assert body["college_id"] == 2

    def test_student_cannot_use_admin_routes(self, client, login_as):
        login_as(UserRole.student)
        assert client.get("/api/admin/placements").status_code == 403

    def test_college_cannot_use_student_routes(self, client, login_as):
        login_as(UserRole.college)
        assert client.get("/api/career-tracks/my-plan/list").status_code == 403

    def test_college_cannot_chat(self, client, login_as):
        login_as(UserRole.college)
        assert client.get("/api/chat/conversations").status_code == 403


# =============================================================================
# Registration and login
# =============================================================================

STUDENT = {"firstName": "Asha", "lastName": "Rao", "email": "asha@example.com", "password": "password123"}


class TestRegisterStudent:

    def test_missing_fields(self, client):
        response = client.post("/api/auth/register-student", json={"email": "asha@example.com"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields"

    def test_duplicate_email(self, client, fake_db):
        fake_db.db.execute.return_value.fetchone.return_value = SimpleNamespace(student_id=1)

        with patch("studentpath.api.routes.auth_routes.get_db_session", fake_db.session):
            response = client.post("/api/auth/register-student", json=STUDENT)

        assert response.status_code == 409

    def test_invalid_college_token(self, client, fake_db):
        fake_db.db.execute.return_value.fetchone.return_value = None

        with patch("studentpath.api.routes.auth_routes.get_db_session", fake_db.session):
            response = client.post("/api/auth/register-student", json={**STUDENT, "collegeToken": "NOPE"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired college token"

    def test_rate_limited_after_three_attempts(self, client):
        codes = [client.post("/api/auth/register-student", json={}).status_code for _ in range(4)]
        assert codes == [400, 400, 400, 429]


class TestLogin:

    def test_validation_before_lookup(self, client):
        assert client.post("/api/auth/login", json={"password": "x"}).json()["detail"] == "Invalid email address"
        assert client.post("/api/auth/login", json={"email": "a@b.c"}).json()["detail"] == "Password is required"
        response = client.post("/api/auth/login", json={"email": "a@b.c", "password": "x"})
        assert response.json()["detail"] == "College token is required"

    def test_successful_login_sets_cookie(self, client, fake_db):
        fake_db.db.execute.return_value.fetchone.return_value = SimpleNamespace(
            student_id=7, password_hash=hash_password("password123"), college_token="TOK123",
        )

        with patch("studentpath.api.routes.auth_routes.get_db_session", fake_db.session):
            response = client.post(
                "/api/auth/login",
                json={"email": "asha@example.com", "password": "password123", "collegeToken": "TOK123"},
            )

        assert response.status_code == 200
        assert response.json()["redirectTo"] == "/dashboard"
        assert "set-cookie" in response.headers

    def test_wrong_college_token(self, client, fake_db):
        fake_db.db.execute.return_value.fetchone.return_value = SimpleNamespace(
            student_id=7, password_hash=hash_password("password123"), college_token="TOK123",
        )

        with patch("studentpath.api.routes.auth_routes.get_db_session", fake_db.session):
            response = client.post(
                "/api/auth/login",
                json={"email": "asha@example.com", "password": "password123", "collegeToken": "OTHER"},
            )

        assert response.status_code == 403

    def test_rate_limited_after_five_attempts(self, client):
        codes = [client.post("/api/auth/login", json={}).status_code for _ in range(6)]
        assert codes[:5] == [400] * 5
        assert codes[5] == 429
        assert client.post("/api/auth/login", json={}).json()["detail"].startswith("Too many login attempts")


class TestResetPassword:

    def test_short_password(self, client):
        response = client.post(
            "/api/auth/reset-password",
            json={"token": "abc", "newPassword": "short", "userType": "student"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Password must be at least 8 characters long"

    def test_unknown_user_type(self, client):
        response = client.post(
            "/api/auth/reset-password",
            json={"token": "abc", "newPassword": "longenough", "userType": "admin"},
        )
        assert response.json()["detail"] == "Invalid user type"

    def test_forgot_password_hides_missing_account(self, client, fake_db):
        fake_db.db.execute.return_value.fetchone.return_value = None

        with patch("studentpath.api.routes.auth_routes.get_db_session", fake_db.session):
            response = client.post(
                "/api/auth/forgot-password", json={"email": "ghost@example.com", "userType": "student"}
            )

        assert response.status_code == 200
        assert response.json()["success"] is True
