# tests/test_auth_api.py

from __future__ import annotations

from datetime import timedelta
from urllib.parse import parse_qs, urlparse
import json

import pytest

from src.api.deps import get_oauth_client
from src.main import app
from src.models.user import AuthProvider, ExternalProfile
from src.services.user_service import UserService
from src.utils.dates import utc_now

from .fakes import FakeOAuthClient
from .helpers import DEFAULT_PASSWORD, auth_headers


def login(client, username: str, password: str = DEFAULT_PASSWORD):
    return client.post("/api/auth/login", json={"username": username, "password": password})


# registration and login

def test_register_returns_identity_and_token(client) -> None:
    response = client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "Alice@Example.com", "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert body["data"]["username"] == "alice"
    assert body["data"]["email"] == "alice@example.com"
    assert body["data"]["token"]
    assert "password" not in json.dumps(body)


def test_register_duplicate_username_or_email_conflicts(client, register) -> None:
    register("alice")

    same_name = client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "other@example.com", "password": DEFAULT_PASSWORD},
    )
    same_email = client.post(
        "/api/auth/register",
        json={"username": "alice2", "email": "alice@example.com", "password": DEFAULT_PASSWORD},
    )

    assert same_name.status_code == 409
    assert same_email.status_code == 409
    assert same_name.json() == {"success": False, "message": "Username or email already exists"}


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"username": "al", "email": "al@example.com", "password": DEFAULT_PASSWORD}, "username"),
        ({"username": "al ice", "email": "al@example.com", "password": DEFAULT_PASSWORD}, "username"),
        ({"username": "alice", "email": "not-an-email", "password": DEFAULT_PASSWORD}, "email"),
        ({"username": "alice", "email": "alice@example.com", "password": "short"}, "password"),
        ({"username": "alice", "email": "alice@example.com", "password": "alllowercase1"}, "password"),
    ],
)
def test_register_validation_errors(client, payload, field) -> None:
    response = client.post("/api/auth/register", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert field in {error["field"] for error in body["errors"]}


@pytest.mark.parametrize("email", ["a@b..com", "x@-.y", "a,b@c.d", ".a@b.co", "alice@", "alice.example.com"])
def test_register_rejects_malformed_email(client, email) -> None:
    response = client.post(
        "/api/auth/register",
        json={"username": "alice", "email": email, "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 400
    assert {"field": "email", "message": "Please provide a valid email address"} in response.json()["errors"]


def test_login_with_username_or_email(client, register) -> None:
    register("alice")

    by_name = login(client, "alice")
    by_email = login(client, "alice@example.com")

    assert by_name.status_code == 200
    assert by_name.json()["message"] == "Login successful"
    assert by_name.json()["data"]["token"]
    assert by_email.status_code == 200


def test_login_failures_share_one_message(client, register) -> None:
    register("alice")

    wrong_password = login(client, "alice", "Wrong1pass")
    unknown_user = login(client, "nobody")

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json()["message"] == unknown_user.json()["message"] == "Invalid username or password"


def test_login_requires_both_fields(client) -> None:
    response = client.post("/api/auth/login", json={"username": "", "password": ""})

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"username", "password"}


# profile and password change

def test_profile_requires_a_valid_token(client, register) -> None:
    alice = register("alice")

    missing = client.get("/api/auth/profile")
    garbage = client.get("/api/auth/profile", headers=auth_headers("not.a.token"))
    ok = client.get("/api/auth/profile", headers=auth_headers(alice["token"]))

    assert missing.status_code == 401
    assert missing.json()["message"] == "Access token required"
    assert garbage.status_code == 401
    assert garbage.json()["message"] == "Invalid or expired token"
    assert ok.status_code == 200
    profile = ok.json()["data"]
    assert profile["id"] == alice["id"]
    assert profile["auth_provider"] == "local"
    assert "password_hash" not in profile
    assert "reset_token" not in profile


def test_change_password(client, register) -> None:
    alice = register("alice")
    headers = auth_headers(alice["token"])

    wrong = client.put(
        "/api/auth/password",
        json={"current_password": "Wrong1pass", "new_password": "Newpass1"},
        headers=headers,
    )
    ok = client.put(
        "/api/auth/password",
        json={"current_password": DEFAULT_PASSWORD, "new_password": "Newpass1"},
        headers=headers,
    )

    assert wrong.status_code == 400
    assert wrong.json()["message"] == "Current password is incorrect"
    assert ok.status_code == 200
    assert login(client, "alice").status_code == 401
    assert login(client, "alice", "Newpass1").status_code == 200


def test_change_password_revokes_pending_reset_token(client, register, email_service, session) -> None:
    alice = register("alice")
    client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})
    token = email_service.last_token

    changed = client.put(
        "/api/auth/password",
        json={"current_password": DEFAULT_PASSWORD, "new_password": "Newpass1"},
        headers=auth_headers(alice["token"]),
    )
    assert changed.status_code == 200

    reset = client.post("/api/auth/reset-password", json={"token": token, "password": "Another1"})
    assert reset.status_code == 400
    assert reset.json()["message"] == "Invalid or expired reset token"

    session.expire_all()
    user = UserService.find_by_username(session, "alice")
    assert user.reset_token is None
    assert user.reset_token_expires_at is None
    assert login(client, "alice", "Newpass1").status_code == 200


# password recovery

def test_reset_password_round_trip(client, register, email_service) -> None:
    register("alice")

    forgot = client.post("/api/auth/forgot-password", json={"email": "ALICE@example.com"})
    assert forgot.status_code == 200
    assert email_service.sent[-1][0] == "alice@example.com"
    token = email_service.last_token

    check = client.get("/api/auth/verify-reset-token", params={"token": token})
    assert check.status_code == 200
    assert check.json()["message"] == "Token is valid"

    reset = client.post("/api/auth/reset-password", json={"token": token, "password": "Newpass1"})
    assert reset.status_code == 200

    assert login(client, "alice").status_code == 401
    assert login(client, "alice", "Newpass1").status_code == 200

    reused = client.post("/api/auth/reset-password", json={"token": token, "password": "Another1"})
    assert reused.status_code == 400
    assert reused.json()["message"] == "Invalid or expired reset token"


def test_stored_reset_token_is_not_the_emailed_value(client, register, email_service, session) -> None:
    register("alice")
    client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})

    session.expire_all()
    user = UserService.find_by_username(session, "alice")

    assert user.reset_token
    assert user.reset_token != email_service.last_token


def test_expired_reset_token_is_rejected(client, register, email_service, session) -> None:
    register("alice")
    client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})
    token = email_service.last_token

    session.expire_all()
    user = UserService.find_by_username(session, "alice")
    UserService.save(session, user, reset_token_expires_at=utc_now() - timedelta(minutes=1))

    check = client.get("/api/auth/verify-reset-token", params={"token": token})
    reset = client.post("/api/auth/reset-password", json={"token": token, "password": "Newpass1"})

    assert check.status_code == 400
    assert check.json()["message"] == "Invalid or expired token"
    assert reset.status_code == 400
    assert login(client, "alice").status_code == 200


def test_forgot_password_unknown_email(client) -> None:
    response = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

    assert response.status_code == 404
    assert response.json()["message"] == "No account found with this email"


def test_forgot_password_for_external_account(client, make_user, email_service) -> None:
    make_user("gina", external_id="g-1", auth_provider=AuthProvider.EXTERNAL)

    response = client.post("/api/auth/forgot-password", json={"email": "gina@example.com"})

    assert response.status_code == 400
    assert "Google" in response.json()["message"]
    assert email_service.sent == []


def test_forgot_password_when_email_fails(client, register, email_service) -> None:
    register("alice")
    email_service.succeed = False

    response = client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to send reset email. Please try again."


def test_reset_password_requires_strong_password(client) -> None:
    response = client.post("/api/auth/reset-password", json={"token": "abc", "password": "weak"})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "password"


# Google sign-in

def test_google_login_unconfigured(client) -> None:
    response = client.get("/api/auth/google")

    assert response.status_code == 503
    assert response.json()["message"] == "Google OAuth is not configured"


def test_google_callback_unconfigured_redirects_with_error(client) -> None:
    response = client.get("/api/auth/google/callback", params={"code": "x"}, follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/?error=google_not_configured"


@pytest.fixture()
def google(client):
    fake = FakeOAuthClient(ExternalProfile(external_id="google-123", email="Gina@Example.com", name="Gina"))
    app.dependency_overrides[get_oauth_client] = lambda: fake
    return fake


def callback_params(response) -> dict:
    assert response.status_code == 307
    return {key: values[0] for key, values in parse_qs(urlparse(response.headers["location"]).query).items()}


def test_google_login_redirects_to_provider(client, google) -> None:
    response = client.get("/api/auth/google", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == google.authorization_url()


def test_google_callback_creates_external_account(client, google, session) -> None:
    params = callback_params(client.get("/api/auth/google/callback", params={"code": "ok"}, follow_redirects=False))

    user = json.loads(params["user"])
    assert user["email"] == "gina@example.com"
    profile = client.get("/api/auth/profile", headers=auth_headers(params["token"]))
    assert profile.json()["data"]["auth_provider"] == "external"
    assert profile.json()["data"]["verified"] is True

    again = callback_params(client.get("/api/auth/google/callback", params={"code": "ok"}, follow_redirects=False))
    assert json.loads(again["user"])["id"] == user["id"]


def test_google_callback_links_existing_local_account(client, google, register) -> None:
    local = register("gina", email="gina@example.com")

    params = callback_params(client.get("/api/auth/google/callback", params={"code": "ok"}, follow_redirects=False))

    assert json.loads(params["user"])["id"] == local["id"]
    assert login(client, "gina").status_code == 200


def test_google_callback_failures(client, google) -> None:
    missing = callback_params(client.get("/api/auth/google/callback", follow_redirects=False))
    rejected = callback_params(client.get("/api/auth/google/callback", params={"code": "bad"}, follow_redirects=False))

    assert missing == {"error": "google_auth_failed"}
    assert rejected == {"error": "auth_failed"}
