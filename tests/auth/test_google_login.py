"""
Tests for Google sign-in.
"""
import asyncio

import httpx
import pytest

from medconnect.auth import google
from medconnect.auth.exceptions import InvalidTokenException, IdentityProviderException
from medconnect.auth.models import User, Gender, CredentialKind

GOOGLE_BODY = {"access_token": "ya29.access", "code": "id-token"}


def google_login(client, body=GOOGLE_BODY):
    return client.post("/api/v1/auth/googlelogin", json=body)


def test_google_login_provisions_new_account(client, db, google_identity):
    response = google_login(client)

    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"]["email"] == "jane.google@example.com"
    assert data["user"]["firstName"] == "Jane"
    assert data["user"]["gender"] == "unspecified"
    assert data["user"]["mustUpdateGender"] is True

    user = db.query(User).one()
    assert user.credential_kind == CredentialKind.EXTERNAL
    assert user.password_hash is None
    assert user.email_verified is True
    assert user.profile_picture == "https://example.com/jane.png"


def test_google_login_reuses_existing_account(client, db, make_user, google_identity):
    user = make_user(email="jane.google@example.com", verified=False, gender=Gender.FEMALE)

    response = google_login(client)

    assert response.status_code == 200
    assert response.json()["user"]["userId"] == user.id
    assert response.json()["user"]["mustUpdateGender"] is False
    db.expire_all()
    user = db.query(User).one()
    assert user.email_verified is True
    assert user.credential_kind == CredentialKind.PASSWORD


def test_google_login_twice_keeps_one_account(client, db, google_identity):
    google_login(client)
    google_login(client)

    assert db.query(User).count() == 1


def test_google_login_requires_both_tokens(client):
    response = google_login(client, {"code": "id-token"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Access token and code are required."


def test_google_login_rejects_foreign_audience(client, db, google_identity):
    google_identity["aud"] = "someone-else.apps.googleusercontent.com"

    response = google_login(client)

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token."
    assert db.query(User).count() == 0


def test_google_login_rejects_unverified_google_email(client, db, google_identity):
    google_identity["email_verified"] = False

    response = google_login(client)

    assert response.status_code == 401
    assert db.query(User).count() == 0


def test_google_account_cannot_use_password_login(client, google_identity):
    google_login(client)

    response = client.post(
        "/api/v1/auth/login",
        json={"email": "jane.google@example.com", "password": "anything123"},
    )

    assert response.status_code == 401
    assert "Google" in response.json()["detail"]


def use_google_transport(monkeypatch, handler):
    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(google.httpx, "AsyncClient", client_factory)


def test_verify_google_id_token_parses_claims(monkeypatch):
    def handler(request):
        assert request.url.params["id_token"] == "id-token"
        return httpx.Response(200, json={
            "aud": "client-id",
            "email": "jane@example.com",
            "email_verified": "true",
            "given_name": "Jane",
        })

    use_google_transport(monkeypatch, handler)

    claims = asyncio.run(google.verify_google_id_token("id-token"))

    assert claims.aud == "client-id"
    assert claims.email_verified is True
    assert claims.family_name is None


def test_verify_google_id_token_rejected(monkeypatch):
    use_google_transport(monkeypatch, lambda request: httpx.Response(400, json={"error": "invalid_token"}))

    with pytest.raises(InvalidTokenException):
        asyncio.run(google.verify_google_id_token("bad"))


def test_verify_google_id_token_unreachable(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    use_google_transport(monkeypatch, handler)

    with pytest.raises(IdentityProviderException):
        asyncio.run(google.verify_google_id_token("id-token"))


def test_google_login_reuses_row_from_concurrent_provisioning(client, db, google_identity, concurrent_insert):
    winner = User(
        email="jane.google@example.com",
        first_name="Jane",
        last_name="Doe",
        gender=Gender.UNSPECIFIED,
        is_doctor=False,
        credential_kind=CredentialKind.EXTERNAL,
        email_verified=True,
    )
    concurrent_insert(winner)

    response = google_login(client)

    assert response.status_code == 200
    db.expire_all()
    assert db.query(User).count() == 1
    assert response.json()["user"]["userId"] == db.query(User).one().id


def test_verify_google_id_token_uses_configured_timeout(monkeypatch):
    seen = {}
    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        seen.update(kwargs)
        transport = httpx.MockTransport(lambda request: httpx.Response(400))
        return real_client(transport=transport, **kwargs)

    monkeypatch.setattr(google.httpx, "AsyncClient", client_factory)
    monkeypatch.setattr(google.settings, "google_timeout_seconds", 2.5)

    with pytest.raises(InvalidTokenException):
        asyncio.run(google.verify_google_id_token("id-token"))

    assert seen["timeout"] == 2.5
