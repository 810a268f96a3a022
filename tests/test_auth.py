"""Tests for authentication endpoints."""
from httpx import AsyncClient

from homie_identity.models import UserStatus


async def register_and_verify(client: AsyncClient, mailer, payload):
    response = await client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201
    user_id = response.json()["id"]
    response = await client.post(
        "/api/v1/auth/verify",
        json={"user_id": user_id, "code": mailer.last_code(payload["email"])},
    )
    assert response.status_code == 200
    return user_id


async def test_health(client: AsyncClient):
    """Test health endpoint."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_register_user(client: AsyncClient, mailer, customer_payload):
    """Test user registration."""
    response = await client.post("/api/v1/auth/register", json=customer_payload)

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "newuser@example.com"
    assert "access_token" not in data
    assert mailer.last_to("newuser@example.com").subject == "Verify Your Email"


async def test_register_duplicate_email(client: AsyncClient, test_user, customer_payload):
    """Test registration with duplicate email."""
    customer_payload["email"] = test_user.email
    response = await client.post("/api/v1/auth/register", json=customer_payload)

    assert response.status_code == 409
    body = response.json()
    assert "already exists" in body["error"]
    assert body["error_code"] == "CONFLICT_ERROR"


async def test_register_rejects_admin_role(client: AsyncClient, customer_payload):
    """Test that administrators cannot self-register."""
    customer_payload["role"] = "ADMIN"
    response = await client.post("/api/v1/auth/register", json=customer_payload)

    assert response.status_code == 422


async def test_register_invalid_payload(client: AsyncClient):
    """Test registration with malformed input."""
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": "not-an-email", "password": "short", "first_name": "", "last_name": "X"},
    )

    assert response.status_code == 422


async def test_register_email_outage(client: AsyncClient, mailer, services, customer_payload):
    """Test registration when the verification email cannot be sent."""
    mailer.fail = True
    response = await client.post("/api/v1/auth/register", json=customer_payload)

    assert response.status_code == 503
    assert response.json()["error"] == "Error sending verification email"
    assert await services.store.find_user_by_email(customer_payload["email"]) is None


async def test_verify_with_wrong_code(client: AsyncClient, mailer, customer_payload):
    """Test verification with an incorrect code."""
    response = await client.post("/api/v1/auth/register", json=customer_payload)
    code = mailer.last_code(customer_payload["email"])
    wrong = "000000" if code != "000000" else "999999"

    response = await client.post(
        "/api/v1/auth/verify",
        json={"user_id": response.json()["id"], "code": wrong},
    )

    assert response.status_code == 401


async def test_login_before_verification(client: AsyncClient, customer_payload):
    """Test login is refused until the email is verified."""
    await client.post("/api/v1/auth/register", json=customer_payload)

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": customer_payload["email"], "password": customer_payload["password"]},
    )

    assert response.status_code == 403
    assert response.json()["error_code"] == "EMAIL_NOT_VERIFIED"


async def test_register_verify_and_login(client: AsyncClient, mailer, customer_payload):
    """Test the full registration flow ends in a usable session."""
    await register_and_verify(client, mailer, customer_payload)

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": customer_payload["email"], "password": customer_payload["password"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["status"] == "ACTIVE"
    assert "password_hash" not in data["user"]


async def test_resend_code(client: AsyncClient, mailer, customer_payload):
    """Test resending a verification code."""
    response = await client.post("/api/v1/auth/register", json=customer_payload)

    response = await client.post(
        "/api/v1/auth/resend-code", json={"user_id": response.json()["id"]}
    )

    assert response.status_code == 200
    assert len(mailer.sent) == 2


async def test_login_success(client: AsyncClient, test_user):
    """Test successful login."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": test_user.email, "password": "testpassword123"},
    )

    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert "refresh_token" in data
    assert data["user"]["email"] == test_user.email


async def test_login_wrong_password(client: AsyncClient, test_user):
    """Test login with wrong password."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": test_user.email, "password": "wrongpassword"},
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid email or password"


async def test_login_nonexistent_user(client: AsyncClient):
    """Test login with nonexistent user."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "nonexistent@example.com", "password": "password123"},
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid email or password"


async def test_refresh_and_logout(client: AsyncClient, test_user):
    """Test refresh rotation and logout."""
    login = await client.post(
        "/api/v1/auth/login",
        json={"email": test_user.email, "password": "testpassword123"},
    )
    first_refresh = login.json()["refresh_token"]

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": first_refresh})
    assert response.status_code == 200
    second_refresh = response.json()["refresh_token"]

    replay = await client.post("/api/v1/auth/refresh", json={"refresh_token": first_refresh})
    assert replay.status_code == 401

    response = await client.post("/api/v1/auth/logout", json={"refresh_token": second_refresh})
    assert response.status_code == 200
    response = await client.post("/api/v1/auth/logout", json={"refresh_token": second_refresh})
    assert response.status_code == 200

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": second_refresh})
    assert response.status_code == 401


async def test_get_current_user(client: AsyncClient, auth_headers):
    """Test getting current user info."""
    response = await client.get("/api/v1/auth/me", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert "email" in data
    assert "role" in data


async def test_get_current_user_unauthorized(client: AsyncClient):
    """Test getting current user without auth."""
    response = await client.get("/api/v1/auth/me")

    assert response.status_code == 401


async def test_get_current_user_bad_token(client: AsyncClient):
    """Test getting current user with a forged token."""
    response = await client.get(
        "/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"}
    )

    assert response.status_code == 401


async def test_suspended_user_token_rejected(client: AsyncClient, services, test_user, auth_headers):
    """Test that access tokens stop working once the account is suspended."""
    await services.accounts.change_user_status(test_user.id, UserStatus.SUSPENDED)
    response = await client.get("/api/v1/auth/me", headers=auth_headers)

    assert response.status_code == 403
    assert response.json()["error"] == "Account not available"


async def test_change_password(client: AsyncClient, auth_headers):
    """Test changing password."""
    response = await client.post(
        "/api/v1/auth/change-password",
        headers=auth_headers,
        json={"current_password": "testpassword123", "new_password": "newtestpassword123"},
    )

    assert response.status_code == 200
    assert response.json()["success"] is True


async def test_change_password_wrong_current(client: AsyncClient, auth_headers):
    """Test changing password with wrong current password."""
    response = await client.post(
        "/api/v1/auth/change-password",
        headers=auth_headers,
        json={"current_password": "wrongpassword", "new_password": "newtestpassword123"},
    )

    assert response.status_code == 401


async def test_forgot_and_reset_password(client: AsyncClient, mailer, test_user):
    """Test the password reset round trip."""
    response = await client.post(
        "/api/v1/auth/forgot-password", json={"email": test_user.email}
    )
    assert response.status_code == 200
    token = mailer.last_reset_token(test_user.email)

    response = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": token, "new_password": "resetpassword123"},
    )
    assert response.status_code == 200

    response = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": token, "new_password": "again-password123"},
    )
    assert response.status_code == 401

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": test_user.email, "password": "resetpassword123"},
    )
    assert response.status_code == 200


async def test_forgot_password_unknown_email(client: AsyncClient, mailer):
    """Test forgot password does not reveal unknown accounts."""
    response = await client.post(
        "/api/v1/auth/forgot-password", json={"email": "ghost@example.com"}
    )

    assert response.status_code == 200
    assert mailer.sent == []
