import pytest

from helpers import auth_headers, register
from model.usermodels import User, UserRole
from service.user_service import UserRepository
from utils.auth_utils import ADMIN_ONLY, Identity, authenticate, authorize, extract_bearer_token
from utils.exceptions import Forbidden, Unauthorized


@pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Token abc", "abc"])
def test_extract_bearer_token_rejects_bad_headers(header):
    with pytest.raises(Unauthorized) as excinfo:
        extract_bearer_token(header)
    assert excinfo.value.message == "Access denied. No token provided."


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"
    assert extract_bearer_token("bearer abc") == "abc"


def test_authenticate_returns_current_identity(container, db_session, employee_token):
    identity = authenticate(employee_token, container.token_service, UserRepository(db_session))

    assert identity.email == "anna@example.com"
    assert identity.role == UserRole.employee
    assert identity.first_name == "Anna"


def test_authenticate_rejects_garbage(container, db_session):
    with pytest.raises(Unauthorized) as excinfo:
        authenticate("garbage", container.token_service, UserRepository(db_session))
    assert excinfo.value.message == "Invalid token."


def test_authenticate_rejects_deleted_user(container, db_session, employee_token):
    db_session.query(User).filter(User.email == "anna@example.com").delete()
    db_session.commit()

    with pytest.raises(Unauthorized):
        authenticate(employee_token, container.token_service, UserRepository(db_session))


def test_authorize():
    admin = Identity(id=1, email="boss@example.com", role=UserRole.admin, first_name="Bob", last_name="Admin")
    employee = Identity(id=2, email="anna@example.com", role=UserRole.employee, first_name="Anna", last_name="Kowalska")

    authorize(admin, ADMIN_ONLY)
    authorize(employee, {UserRole.admin, UserRole.employee})
    with pytest.raises(Forbidden):
        authorize(employee, ADMIN_ONLY)


def test_protected_route_without_token(client):
    response = client.get("/api/leaves/my")
    assert response.status_code == 401
    assert response.json() == {"error": "Access denied. No token provided."}


def test_protected_route_with_invalid_token(client):
    response = client.get("/api/leaves/my", headers=auth_headers("not-a-jwt"))
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token."}


def test_employee_cannot_reach_admin_routes(client, employee_token):
    response = client.get("/api/leaves", headers=auth_headers(employee_token))
    assert response.status_code == 403
    assert response.json() == {"error": "Access denied. Insufficient permissions."}

    response = client.put(
        "/api/leaves/1", json={"status": "approved"}, headers=auth_headers(employee_token)
    )
    assert response.status_code == 403


def test_role_is_read_from_database_not_token(client, db_session, employee_token, admin_token):
    # promote Anna after her token was issued
    anna = db_session.query(User).filter(User.email == "anna@example.com").one()
    anna.role = UserRole.admin
    db_session.commit()
    assert client.get("/api/leaves", headers=auth_headers(employee_token)).status_code == 200

    # demote Bob after his token was issued
    bob = db_session.query(User).filter(User.email == "boss@example.com").one()
    bob.role = UserRole.employee
    db_session.commit()
    assert client.get("/api/leaves", headers=auth_headers(admin_token)).status_code == 403


def test_token_of_deleted_user_is_rejected(client, db_session):
    token = register(client, email="temp@example.com").json()["token"]
    db_session.query(User).filter(User.email == "temp@example.com").delete()
    db_session.commit()

    response = client.get("/api/auth/me", headers=auth_headers(token))
    assert response.status_code == 401
