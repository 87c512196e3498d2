import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]
TEST_DB_PATH = BASE_DIR / "test.db"

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
# Twilio stays unconfigured; tests that need it install a fake provider.
for _name in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_VERIFY_SERVICE_SID"):
    os.environ[_name] = ""

import app.main as main  # noqa: E402  (import after env vars are set)
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.auth_service import create_access_token  # noqa: E402
from app.services.sms_verification_service import get_verification_provider  # noqa: E402


class FakeTwilioError(Exception):
    def __init__(self, status: int, message: str = "Twilio error"):
        super().__init__(message)
        self.status = status


class FakeVerifyProvider:
    """Stands in for TwilioVerifyProvider; records calls and replays scripted results."""

    def __init__(self, check_status="approved", start_error=None, check_error=None):
        self.check_status = check_status
        self.start_error = start_error
        self.check_error = check_error
        self.started: list[str] = []
        self.checked: list[tuple[str, str]] = []

    def start_verification(self, phone, channel="sms"):
        self.started.append(phone)
        if self.start_error:
            raise self.start_error
        return "pending"

    def check_verification(self, phone, code):
        self.checked.append((phone, code))
        if self.check_error:
            raise self.check_error
        return self.check_status


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def client():
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def use_provider():
    """Install a fake Twilio provider for the duration of a test."""

    def _install(provider):
        main.app.dependency_overrides[get_verification_provider] = lambda: provider
        return provider

    yield _install
    main.app.dependency_overrides.pop(get_verification_provider, None)


@pytest.fixture()
def make_user(db_session):
    def _make(**overrides):
        data = {"phone": "+919876543210", "name": "Asha", "phone_verified": True, "auth_provider": "phone"}
        data.update(overrides)
        user = User(**data)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def auth_headers(make_user):
    def _headers(user=None):
        user = user or make_user()
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
