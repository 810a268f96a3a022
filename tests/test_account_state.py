"""Tests for account status transitions and the cleanup sweep."""
import uuid
from datetime import timedelta

import pytest

from homie_identity.core.auth import utcnow
from homie_identity.core.exceptions import InvalidStateTransitionError, NotFoundError
from homie_identity.models import (
    Artisan,
    ArtisanStatus,
    RefreshToken,
    TokenPurpose,
    UserRole,
    UserStatus,
)
from homie_identity.schemas.auth import UserRegister


@pytest.mark.parametrize(
    "start, target",
    [
        (UserStatus.ACTIVE, UserStatus.SUSPENDED),
        (UserStatus.ACTIVE, UserStatus.BANNED),
        (UserStatus.SUSPENDED, UserStatus.ACTIVE),
        (UserStatus.SUSPENDED, UserStatus.BANNED),
    ],
)
async def test_allowed_user_transitions(services, user_factory, start, target):
    user = await user_factory("state@example.com", status=start)

    updated = await services.accounts.change_user_status(user.id, target)

    assert updated.status == target
    assert (await services.store.find_user_by_id(user.id)).status == target


@pytest.mark.parametrize(
    "start, target, verified",
    [
        (UserStatus.PENDING, UserStatus.ACTIVE, False),
        (UserStatus.BANNED, UserStatus.ACTIVE, True),
        (UserStatus.BANNED, UserStatus.SUSPENDED, True),
        (UserStatus.ACTIVE, UserStatus.PENDING, True),
    ],
)
async def test_forbidden_user_transitions(services, user_factory, start, target, verified):
    user = await user_factory("state@example.com", status=start, verified=verified)

    with pytest.raises(InvalidStateTransitionError) as exc_info:
        await services.accounts.change_user_status(user.id, target)

    assert exc_info.value.status_code == 409
    assert (await services.store.find_user_by_id(user.id)).status == start


async def test_unknown_user_status_change(services):
    with pytest.raises(NotFoundError):
        await services.accounts.change_user_status(uuid.uuid4(), UserStatus.BANNED)


async def _artisan(services, user_factory):
    user = await user_factory("maker@example.com", role=UserRole.ARTISAN)
    return await services.store.create_artisan(Artisan(
        user_id=user.id,
        business_name="Maker Works",
        business_license="LIC-M",
        service_categories=["Carpentry"],
        service_areas=["Ibadan"],
    ))


async def test_artisan_approval_stamps_verification_date(services, user_factory, clock):
    artisan = await _artisan(services, user_factory)

    updated = await services.accounts.change_artisan_status(artisan.id, ArtisanStatus.VERIFIED)

    assert updated.status == ArtisanStatus.VERIFIED
    assert updated.verification_date == clock.now


async def test_artisan_decision_is_final(services, user_factory):
    artisan = await _artisan(services, user_factory)
    await services.accounts.change_artisan_status(artisan.id, ArtisanStatus.REJECTED)

    with pytest.raises(InvalidStateTransitionError):
        await services.accounts.change_artisan_status(artisan.id, ArtisanStatus.VERIFIED)


async def test_cleanup_removes_expired_tokens_and_stale_registrations(services, test_user):
    pending = (await services.verification.register(UserRegister(
        email="abandoned@example.com",
        password="password123",
        first_name="Gone",
        last_name="Soon",
    ))).user
    now = utcnow()
    await services.store.create_refresh_token(RefreshToken(
        user_id=test_user.id, token="old-session", expires_at=now - timedelta(minutes=1)
    ))
    await services.store.create_refresh_token(RefreshToken(
        user_id=test_user.id, token="live-session", expires_at=now + timedelta(days=30)
    ))

    summary = await services.cleanup.run_once(now + timedelta(hours=25))

    assert summary.verification_tokens_deleted == 1
    assert summary.refresh_tokens_deleted == 1
    assert summary.users_deleted == 1
    assert await services.store.find_user_by_id(pending.id) is None
    assert await services.store.find_user_by_id(test_user.id) is not None
    assert await services.store.find_refresh_token_by_value("live-session") is not None


async def test_cleanup_keeps_recent_registrations(services):
    pending = (await services.verification.register(UserRegister(
        email="recent@example.com",
        password="password123",
        first_name="Still",
        last_name="Here",
    ))).user

    summary = await services.cleanup.run_once(utcnow() + timedelta(hours=1))

    assert summary.users_deleted == 0
    assert summary.verification_tokens_deleted == 1
    assert await services.store.find_user_by_id(pending.id) is not None
    assert await services.store.find_latest_verification_token(
        pending.id, TokenPurpose.EMAIL_VERIFICATION
    ) is None
