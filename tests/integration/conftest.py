"""
Integration test configuration
"""
import pytest
from fastapi.testclient import TestClient

from homerecall.api.deps import get_db, get_s3_client, get_sms_service
from homerecall.app.config import Settings
from homerecall.app.main import app
from homerecall.core.security import create_access_token
from homerecall.services.lifecycle import TrashSessions
from homerecall.services.messaging import SmsService


@pytest.fixture
def twilio_client(mocker):
    client = mocker.Mock()
    client.messages.create.return_value = mocker.Mock(sid="SM123")
    return client


@pytest.fixture
def sms_service(twilio_client):
    settings = Settings(
        TWILIO_ACCOUNT_SID="AC00000000000000000000000000000000",
        TWILIO_AUTH_TOKEN="auth-token",
        TWILIO_PHONE_NUMBER="+15550001111",
    )
    return SmsService(settings, client=twilio_client)


@pytest.fixture
def client(db_session, s3_client, sms_service):
    """FastAPI test client with dependency overrides."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_s3_client] = lambda: s3_client
    app.dependency_overrides[get_sms_service] = lambda: sms_service
    app.state.trash_sessions = TrashSessions()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(owner_id):
    return {"Authorization": f"Bearer {create_access_token(owner_id)}"}


@pytest.fixture
def other_auth_headers(other_owner_id):
    return {"Authorization": f"Bearer {create_access_token(other_owner_id)}"}


@pytest.fixture
def jpeg_files():
    def _jpeg_files(count, prefix="photo"):
        return [
            ("files", (f"{prefix}_{i}.jpg", b"\xff\xd8\xff" + bytes([i]) * 32, "image/jpeg"))
            for i in range(count)
        ]
    return _jpeg_files
