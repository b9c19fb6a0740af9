from helpers import PASSWORD, auth_headers, login, register


def test_register_returns_token_and_user_without_password(client):
    response = register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["token"]
    assert body["user"] == {
        "id": body["user"]["id"],
        "email": "anna@example.com",
        "firstName": "Anna",
        "lastName": "Kowalska",
        "role": "employee",
    }
    assert "password" not in body["user"]


def test_register_stores_bcrypt_hash(client, db_session):
    from model.usermodels import User

    register(client)
    user = db_session.query(User).filter(User.email == "anna@example.com").one()
    assert user.password != PASSWORD
    assert user.password.startswith("$2")


def test_register_admin_role(client):
    response = register(client, email="boss@example.com", role="admin")
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "admin"


def test_register_duplicate_email(client):
    assert register(client).status_code == 201

    response = register(client, first_name="Other")
    assert response.status_code == 400
    assert response.json() == {"error": "User already exists"}


def test_register_validation_errors(client):
    short_password = register(client, password="123")
    assert short_password.status_code == 400
    assert "password" in short_password.json()["error"]

    bad_email = client.post(
        "/api/auth/register",
        json={"email": "not-an-email", "password": PASSWORD, "first_name": "Anna", "last_name": "Nowak"},
    )
    assert bad_email.status_code == 400
    assert "email" in bad_email.json()["error"]

    bad_role = register(client, role="superuser")
    assert bad_role.status_code == 400

    short_name = register(client, first_name="A")
    assert short_name.status_code == 400


def test_login_success(client):
    register(client)

    response = login(client)
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["user"]["email"] == "anna@example.com"
    assert "password" not in body["user"]


def test_login_wrong_password_and_unknown_email_are_indistinguishable(client):
    register(client)

    wrong_password = login(client, password="not-the-password")
    unknown_email = login(client, email="ghost@example.com")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid credentials"}


def test_me_returns_current_user(client, employee_token):
    response = client.get("/api/auth/me", headers=auth_headers(employee_token))
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "anna@example.com"


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"error": "Access denied. No token provided."}


def test_health_and_unknown_route(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "OK"

    missing = client.get("/api/nothing-here")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Route not found"}


def test_email_domain_is_normalized_but_local_part_is_not(client):
    created = register(client, email="Anna@Example.COM")
    assert created.status_code == 201
    assert created.json()["user"]["email"] == "Anna@example.com"

    assert login(client, email="Anna@EXAMPLE.com").status_code == 200
    assert login(client, email="anna@example.com").status_code == 401
