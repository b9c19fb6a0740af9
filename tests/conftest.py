import pytest
from fastapi.testclient import TestClient

from helpers import RecordingMailer, register
from main import create_app
from settings import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        jwt_secret_key="test-secret",
        bcrypt_rounds=4,
        upload_dir=str(tmp_path / "uploads"),
        max_upload_size=1024,
        log_level="WARNING",
    )


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(settings, mailer):
    return create_app(settings, mailer=mailer)


@pytest.fixture
def container(app):
    return app.state.container


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(client, container):
    session = container.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def employee_token(client):
    response = register(client)
    assert response.status_code == 201
    return response.json()["token"]


@pytest.fixture
def admin_token(client):
    response = register(client, email="boss@example.com", first_name="Bob", last_name="Admin", role="admin")
    assert response.status_code == 201
    return response.json()["token"]
