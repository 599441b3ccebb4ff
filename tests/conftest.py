"""
Test configuration for the MedConnect backend.
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client.apps.googleusercontent.com")
os.environ.setdefault("MAIL_SUPPRESS_SEND", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from medconnect.database import Base, get_db
from medconnect.main import app
from medconnect.auth import utils as auth_utils
from medconnect.auth import service as auth_service
from medconnect.auth.google import GoogleClaims
from medconnect.auth.models import User, Gender, CredentialKind
from medconnect.core.security import hash_password

# Test database URL
TEST_DATABASE_URL = "sqlite://"

# Create test database engine
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "securepass1"


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """
    Create a test client with a test database session.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """
    Capture outgoing emails instead of sending them.

    Each entry is a dict with ``email``, ``subject`` and ``message``.
    """
    sent = []

    async def fake_send_email(email, subject, message):
        sent.append({"email": email, "subject": subject, "message": message})

    monkeypatch.setattr(auth_utils, "send_email", fake_send_email)
    return sent


@pytest.fixture
def broken_mail(monkeypatch):
    """Make every outgoing email fail."""
    async def failing_send_email(email, subject, message):
        raise ConnectionError("SMTP server unavailable")

    monkeypatch.setattr(auth_utils, "send_email", failing_send_email)


@pytest.fixture
def google_identity(monkeypatch):
    """
    Replace Google token verification with configurable claims.

    Tests mutate the returned dict to change what Google "answers".
    """
    claims = {
        "aud": os.environ["GOOGLE_CLIENT_ID"],
        "email": "jane.google@example.com",
        "email_verified": True,
        "given_name": "Jane",
        "family_name": "Doe",
        "picture": "https://example.com/jane.png",
    }

    async def fake_verify(id_token):
        return GoogleClaims(**claims)

    monkeypatch.setattr(auth_service, "verify_google_id_token", fake_verify)
    return claims


@pytest.fixture
def make_user(db):
    """Insert a user directly into the database."""
    def _make_user(
        email="john@example.com",
        password=TEST_PASSWORD,
        verified=True,
        gender=Gender.MALE,
        credential_kind=CredentialKind.PASSWORD,
    ):
        user = User(
            email=email,
            first_name="John",
            last_name="Smith",
            gender=gender,
            is_doctor=False,
            credential_kind=credential_kind,
            password_hash=hash_password(password) if password else None,
            email_verified=verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def token_from(mail):
    """Extract the one-time token from an emailed message body."""
    return mail["message"].split("\n\n")[1].strip()


def registration_payload(**overrides):
    payload = {
        "firstName": "Alice",
        "lastName": "Walker",
        "email": "alice@example.com",
        "password": TEST_PASSWORD,
        "isDoctor": False,
        "gender": "female",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def concurrent_insert(db, monkeypatch):
    """
    Make the next email lookup miss, then commit ``winner`` as if a
    concurrent request had inserted it between the lookup and the write.
    """
    def _arm(winner):
        real_query = db.query

        class LookupThenInsert:
            def filter(self, *criteria):
                return self

            def first(self):
                monkeypatch.setattr(db, "query", real_query)
                db.add(winner)
                db.commit()
                return None

        monkeypatch.setattr(db, "query", lambda *entities: LookupThenInsert())

    return _arm
