"""Tests for login, refresh rotation and logout."""
import pytest

from homie_identity.core.exceptions import (
    EmailNotVerifiedError,
    ExpiredError,
    ForbiddenError,
    InvalidCredentialError,
)
from homie_identity.models import UserRole, UserStatus
from homie_identity.schemas.auth import UserRegister

TEST_PASSWORD = "testpassword123"


async def test_login_issues_access_and_refresh_tokens(services, test_user):
    session = await services.sessions.login(test_user.email, TEST_PASSWORD)

    claims = services.tokens.decode_access_token(session.access_token)
    assert claims["sub"] == str(test_user.id)
    assert claims["role"] == "CUSTOMER"
    assert session.expires_in == 3600
    assert session.user.last_login is not None
    assert await services.store.find_refresh_token_by_value(session.refresh_token) is not None


async def test_login_email_is_case_insensitive(services, test_user):
    session = await services.sessions.login("TEST@Example.com", TEST_PASSWORD)

    assert session.user.id == test_user.id


async def test_wrong_password_and_unknown_email_look_the_same(services, test_user):
    with pytest.raises(InvalidCredentialError) as wrong_password:
        await services.sessions.login(test_user.email, "wrongpassword")
    with pytest.raises(InvalidCredentialError) as unknown_email:
        await services.sessions.login("nobody@example.com", TEST_PASSWORD)

    assert wrong_password.value.message == unknown_email.value.message


async def test_unverified_user_cannot_login(services, user_factory):
    user = await user_factory("pending@example.com", status=UserStatus.PENDING, verified=False)

    with pytest.raises(EmailNotVerifiedError):
        await services.sessions.login(user.email, TEST_PASSWORD)


@pytest.mark.parametrize("blocked", [UserStatus.SUSPENDED, UserStatus.BANNED])
async def test_blocked_user_cannot_login(services, user_factory, blocked):
    user = await user_factory("blocked@example.com", status=blocked)

    with pytest.raises(ForbiddenError) as exc_info:
        await services.sessions.login(user.email, TEST_PASSWORD)

    assert exc_info.value.message == "Account not available"


async def test_role_restricted_login(services, test_user):
    with pytest.raises(ForbiddenError) as exc_info:
        await services.sessions.login(test_user.email, TEST_PASSWORD, required_role=UserRole.ADMIN)

    assert exc_info.value.error_code == "ROLE_MISMATCH"


async def test_refresh_rotates_and_invalidates_predecessor(services, test_user):
    first = await services.sessions.login(test_user.email, TEST_PASSWORD)

    second = await services.sessions.refresh_access_token(first.refresh_token)

    assert second.refresh_token != first.refresh_token
    assert services.tokens.decode_access_token(second.access_token)["sub"] == str(test_user.id)
    with pytest.raises(InvalidCredentialError):
        await services.sessions.refresh_access_token(first.refresh_token)
    # The successor keeps working
    third = await services.sessions.refresh_access_token(second.refresh_token)
    assert third.refresh_token not in (first.refresh_token, second.refresh_token)


async def test_unknown_refresh_token(services):
    with pytest.raises(InvalidCredentialError):
        await services.sessions.refresh_access_token("not-a-real-token")


async def test_expired_refresh_token_is_deleted(services, test_user, clock):
    session = await services.sessions.login(test_user.email, TEST_PASSWORD)

    clock.advance(days=30)

    with pytest.raises(ExpiredError):
        await services.sessions.refresh_access_token(session.refresh_token)
    assert await services.store.find_refresh_token_by_value(session.refresh_token) is None


async def test_refresh_rejected_after_suspension(services, test_user):
    session = await services.sessions.login(test_user.email, TEST_PASSWORD)
    await services.accounts.change_user_status(test_user.id, UserStatus.SUSPENDED)

    with pytest.raises(ForbiddenError):
        await services.sessions.refresh_access_token(session.refresh_token)


async def test_stale_rotation_loses_compare_and_swap(services, test_user, clock):
    session = await services.sessions.login(test_user.email, TEST_PASSWORD)
    replacement = services.tokens.create_refresh_token(clock())
    # Another request rotates the token first
    await services.store.rotate_refresh_token(
        session.refresh_token, replacement.value, replacement.expires_at
    )

    with pytest.raises(InvalidCredentialError):
        await services.sessions.refresh_access_token(session.refresh_token)


async def test_logout_is_idempotent(services, test_user):
    session = await services.sessions.login(test_user.email, TEST_PASSWORD)

    await services.sessions.logout(session.refresh_token)
    await services.sessions.logout(session.refresh_token)
    await services.sessions.logout("never-issued")

    with pytest.raises(InvalidCredentialError):
        await services.sessions.refresh_access_token(session.refresh_token)


async def test_logout_only_revokes_one_session(services, test_user):
    phone = await services.sessions.login(test_user.email, TEST_PASSWORD)
    laptop = await services.sessions.login(test_user.email, TEST_PASSWORD)

    await services.sessions.logout(phone.refresh_token)

    assert (await services.sessions.refresh_access_token(laptop.refresh_token)).access_token


async def test_register_verify_login_refresh_logout(services, mailer):
    registration = UserRegister(
        email="flow@example.com",
        password="flowpassword1",
        first_name="Flow",
        last_name="Through",
    )
    user = (await services.verification.register(registration)).user

    with pytest.raises(EmailNotVerifiedError):
        await services.sessions.login("flow@example.com", "flowpassword1")

    await services.verification.verify(user.id, mailer.last_code("flow@example.com"))
    session = await services.sessions.login("flow@example.com", "flowpassword1")
    refreshed = await services.sessions.refresh_access_token(session.refresh_token)
    await services.sessions.logout(refreshed.refresh_token)

    with pytest.raises(InvalidCredentialError):
        await services.sessions.refresh_access_token(refreshed.refresh_token)
