"""
Tests for email/password login and the current user endpoint.
"""
from datetime import datetime, timedelta, timezone

from medconnect.auth.models import CredentialKind
from medconnect.core.security import create_access_token
from tests.conftest import TEST_PASSWORD, registration_payload, token_from


def login(client, email, password=TEST_PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def test_login_success(client, make_user):
    user = make_user()

    response = login(client, user.email)

    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"]["userId"] == user.id
    assert data["user"]["firstName"] == "John"
    assert "password" not in response.text


def test_login_requires_email_and_password(client):
    response = client.post("/api/v1/auth/login", json={"email": "john@example.com"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please provide email and password"


def test_login_unknown_email(client):
    response = login(client, "nobody@example.com")

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid Credentials, please verify email again"


def test_login_wrong_password(client, make_user):
    user = make_user()

    response = login(client, user.email, "wrongpass9")

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid Credentials, please verify the password again"


def test_login_requires_verified_email(client, make_user):
    user = make_user(verified=False)

    response = login(client, user.email)

    assert response.status_code == 401
    assert response.json()["detail"] == "Please verify your email to log in."
    assert "token" not in response.json()


def test_login_rejected_for_google_only_account(client, make_user):
    user = make_user(email="g@example.com", password=None, credential_kind=CredentialKind.EXTERNAL)

    response = login(client, user.email)

    assert response.status_code == 401
    assert "Google" in response.json()["detail"]


def test_register_verify_then_login(client, outbox):
    client.post("/api/v1/auth/register", json=registration_payload())

    assert login(client, "alice@example.com").status_code == 401

    client.get(f"/api/v1/auth/verifyemail/{token_from(outbox[0])}")

    assert login(client, "alice@example.com").status_code == 200


def test_me_requires_token(client):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401


def test_me_rejects_garbage_token(client):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_me_returns_current_user(client, make_user):
    user = make_user()
    token = login(client, user.email).json()["token"]

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["userId"] == user.id


def test_me_rejects_token_issued_before_password_change(client, db, make_user):
    user = make_user()
    token = create_access_token({"id": user.id, "email": user.email, "is_doctor": False})

    user.password_changed_at = datetime.now(timezone.utc) + timedelta(seconds=30)
    db.commit()

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_login_with_mixed_case_domain(client, outbox):
    client.post("/api/v1/auth/register", json=registration_payload(email="Alice@Example.COM"))
    client.get(f"/api/v1/auth/verifyemail/{token_from(outbox[0])}")

    response = login(client, "Alice@Example.COM")

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "Alice@example.com"


def test_login_with_malformed_email_is_unknown_account(client):
    response = login(client, "not-an-email")

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid Credentials, please verify email again"
