"""Auth routes against a fake Supabase client."""
import time
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from authlib.integrations.starlette_client import OAuthError
from jose import jwt
from supabase import AuthError

from backend import app
from mockview.models import User
from mockview.routers import auth as auth_routes
from mockview.supabase_client import get_supabase, get_supabase_admin

from tests.conftest import OTHER_USER_ID, USER_ID


class FakeAuthError(AuthError):
    def __init__(self, message):
        Exception.__init__(self, message)
        self.message = message


def make_auth_user(email="new@example.com", full_name="New Person"):
    created = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    return SimpleNamespace(
        id="33333333-3333-4333-8333-333333333333",
        email=email,
        user_metadata={"full_name": full_name},
        created_at=created,
        updated_at=None,
    )


def make_session():
    return SimpleNamespace(access_token="access-123", refresh_token="refresh-456", expires_at=1735790400)


class FakeAuth:
    def __init__(self):
        self.calls = []
        self.error = None
        self.session = make_session()

    def _result(self):
        if self.error:
            raise self.error
        return SimpleNamespace(user=make_auth_user(), session=self.session)

    def sign_up(self, credentials):
        self.calls.append(("sign_up", credentials))
        return self._result()

    def sign_in_with_password(self, credentials):
        self.calls.append(("sign_in_with_password", credentials))
        return self._result()

    def refresh_session(self, refresh_token):
        self.calls.append(("refresh_session", refresh_token))
        return self._result()

    def reset_password_for_email(self, email, options):
        self.calls.append(("reset_password_for_email", email, options))
        if self.error:
            raise self.error

    def sign_in_with_id_token(self, credentials):
        self.calls.append(("sign_in_with_id_token", credentials))
        return self._result()


@pytest.fixture
def fake_auth(anon_client):
    auth = FakeAuth()
    app.dependency_overrides[get_supabase] = lambda: SimpleNamespace(auth=auth)
    return auth


REGISTRATION = {
    "fullName": "New Person",
    "email": "new@example.com",
    "password": "Secret123",
    "confirmPassword": "Secret123",
    "agreeToTerms": True,
}


def test_register_creates_user_and_session(anon_client, fake_auth, db):
    response = anon_client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["fullName"] == "New Person"
    assert data["session"]["accessToken"] == "access-123"
    assert data["session"]["expiresAt"].startswith("2025-01-02T04:00:00")

    name, credentials = fake_auth.calls[0]
    assert name == "sign_up"
    assert credentials["options"]["data"] == {"full_name": "New Person"}

    row = db.query(User).filter(User.email == "new@example.com").one()
    assert row.full_name == "New Person"
    assert row.credits == 0


def test_register_without_session_asks_for_confirmation(anon_client, fake_auth):
    fake_auth.session = None

    response = anon_client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["session"] is None
    assert data["message"] == "Please check your email to confirm your account"


@pytest.mark.parametrize(
    "override",
    [
        {"password": "secret123", "confirmPassword": "secret123"},
        {"confirmPassword": "Different123"},
        {"agreeToTerms": False},
        {"fullName": "A"},
        {"email": "not-an-email"},
    ],
)
def test_register_rejects_invalid_payloads(anon_client, fake_auth, override):
    response = anon_client.post("/api/auth/register", json={**REGISTRATION, **override})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert fake_auth.calls == []


def test_register_reports_supabase_errors(anon_client, fake_auth):
    fake_auth.error = FakeAuthError("User already registered")

    response = anon_client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 400
    assert response.json()["error"] == {
        "message": "User already registered",
        "code": "REGISTRATION_ERROR",
        "details": None,
    }


def test_login_returns_session(anon_client, fake_auth):
    response = anon_client.post(
        "/api/auth/login",
        json={"email": "new@example.com", "password": "Secret123"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["session"]["refreshToken"] == "refresh-456"
    assert data["user"]["credits"] == 0


def test_login_with_bad_credentials(anon_client, fake_auth):
    fake_auth.error = FakeAuthError("Invalid login credentials")

    response = anon_client.post(
        "/api/auth/login",
        json={"email": "new@example.com", "password": "Secret123"},
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"


def test_refresh_returns_new_session(anon_client, fake_auth):
    response = anon_client.post("/api/auth/refresh", json={"refreshToken": "refresh-456"})

    assert response.status_code == 200
    assert fake_auth.calls == [("refresh_session", "refresh-456")]


def test_forgot_password_always_succeeds(anon_client, fake_auth):
    fake_auth.error = FakeAuthError("rate limited")

    response = anon_client.post("/api/auth/forgot-password", json={"email": "new@example.com"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    _, email, options = fake_auth.calls[0]
    assert email == "new@example.com"
    assert options["redirect_to"].endswith("/auth/reset-password")


def test_me_with_supabase_token_creates_user_row(anon_client, db):
    token = jwt.encode(
        {
            "sub": USER_ID,
            "email": "jwt@example.com",
            "aud": "authenticated",
            "exp": int(time.time()) + 3600,
            "user_metadata": {"full_name": "Jay Doe"},
        },
        "test-jwt-secret",
        algorithm="HS256",
    )

    response = anon_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == USER_ID
    assert data["fullName"] == "Jay Doe"
    assert data["credits"] == 0
    assert db.query(User).filter(User.id == USER_ID).count() == 1


def test_me_rejects_wrong_audience(anon_client):
    token = jwt.encode(
        {"sub": USER_ID, "aud": "anon", "exp": int(time.time()) + 3600},
        "test-jwt-secret",
        algorithm="HS256",
    )

    response = anon_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_google_login_not_configured(anon_client):
    response = anon_client.get("/api/auth/login/google", follow_redirects=False)

    assert response.status_code == 501
    assert response.json()["error"]["code"] == "NOT_IMPLEMENTED"


def make_token(sub, **claims):
    return jwt.encode(
        {"sub": sub, "aud": "authenticated", "exp": int(time.time()) + 3600, **claims},
        "test-jwt-secret",
        algorithm="HS256",
    )


def test_me_for_users_without_email(anon_client, db):
    for user_id in (USER_ID, OTHER_USER_ID):
        response = anon_client.get(
            "/api/auth/me",
            headers={"Authorization": f"Bearer {make_token(user_id, phone='+15550100')}"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["email"] is None

    assert db.query(User).filter(User.email.is_(None)).count() == 2


@pytest.fixture
def admin_auth(client):
    calls = []
    state = {"error": None}

    def update_user_by_id(user_id, attributes):
        calls.append((user_id, attributes))
        if state["error"]:
            raise state["error"]

    admin = SimpleNamespace(auth=SimpleNamespace(admin=SimpleNamespace(update_user_by_id=update_user_by_id)))
    app.dependency_overrides[get_supabase_admin] = lambda: admin
    return SimpleNamespace(calls=calls, state=state)


def test_reset_password_updates_current_user(client, admin_auth):
    response = client.post(
        "/api/auth/reset-password",
        json={"password": "NewSecret1", "confirmPassword": "NewSecret1"},
    )

    assert response.status_code == 200
    assert admin_auth.calls == [(USER_ID, {"password": "NewSecret1"})]


def test_reset_password_reports_supabase_errors(client, admin_auth):
    admin_auth.state["error"] = FakeAuthError("Password is too weak")

    response = client.post(
        "/api/auth/reset-password",
        json={"password": "NewSecret1", "confirmPassword": "NewSecret1"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PASSWORD_RESET_ERROR"
    assert response.json()["error"]["message"] == "Password is too weak"


@pytest.fixture
def google(monkeypatch):
    """Google OAuth enabled, with the token exchange answered by ``state``."""
    state = {"token": {"id_token": "google-id-token", "userinfo": {"name": "Gina Google"}}}

    async def authorize_access_token(request):
        if isinstance(state["token"], Exception):
            raise state["token"]
        return state["token"]

    monkeypatch.setattr(auth_routes, "google_enabled", lambda: True)
    monkeypatch.setattr(
        auth_routes,
        "oauth",
        SimpleNamespace(google=SimpleNamespace(authorize_access_token=authorize_access_token)),
    )
    return state


def test_google_callback_redirects_with_tokens(anon_client, fake_auth, google, db):
    response = anon_client.get(
        "/api/auth/callback/google",
        params={"code": "auth-code", "state": "xyz"},
        follow_redirects=False,
    )

    assert response.status_code in (302, 307)
    location = response.headers["location"]
    assert "/auth/callback?" in location
    assert "access_token=access-123" in location
    assert "refresh_token=refresh-456" in location
    assert fake_auth.calls == [("sign_in_with_id_token", {"provider": "google", "token": "google-id-token"})]
    assert db.query(User).filter(User.email == "new@example.com").count() == 1


def test_google_callback_without_code(anon_client, fake_auth, google):
    response = anon_client.get("/api/auth/callback/google", follow_redirects=False)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "No code from Google"


def test_google_callback_without_id_token(anon_client, fake_auth, google):
    google["token"] = {"access_token": "google-access"}

    response = anon_client.get(
        "/api/auth/callback/google",
        params={"code": "auth-code"},
        follow_redirects=False,
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Failed to get ID token from Google"
    assert fake_auth.calls == []


def test_google_callback_authorization_error(anon_client, fake_auth, google):
    google["token"] = OAuthError(error="mismatching_state", description="CSRF Warning! State not equal")

    response = anon_client.get(
        "/api/auth/callback/google",
        params={"code": "auth-code"},
        follow_redirects=False,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "OAUTH_ERROR"
    assert fake_auth.calls == []
