"""Test configuration and fixtures."""
import re
from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from homie_identity.config import AuthSettings, CleanupSettings, DatabaseSettings, Settings
from homie_identity.core.auth import utcnow
from homie_identity.core.exceptions import DependencyError
from homie_identity.database import Database
from homie_identity.main import create_app
from homie_identity.models import User, UserRole, UserStatus
from homie_identity.services import EmailDispatcher, build_services
from homie_identity.store import SqlAlchemyCredentialStore

# In-memory SQLite shared through a single static connection
TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "testpassword123"


class RecordingEmailDispatcher(EmailDispatcher):
    """Keeps sent messages in memory; set ``fail`` to simulate an outage."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, message):
        if self.fail:
            raise DependencyError("Email delivery failed")
        self.sent.append(message)

    def last_to(self, recipient):
        for message in reversed(self.sent):
            if message.recipient == recipient:
                return message
        raise AssertionError(f"no email sent to {recipient}")

    def last_code(self, recipient):
        match = re.search(r"verification code is: (\d+)", self.last_to(recipient).body)
        assert match, "no verification code in email"
        return match.group(1)

    def last_reset_token(self, recipient):
        match = re.search(r"token=(\S+)", self.last_to(recipient).body)
        assert match, "no reset link in email"
        return match.group(1)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now

    def advance(self, **delta):
        self.now += timedelta(**delta)


@pytest.fixture
def settings():
    return Settings(
        database=DatabaseSettings(url=TEST_DATABASE_URL),
        auth=AuthSettings(secret_key="test-secret-key", bcrypt_rounds=4),
        cleanup=CleanupSettings(enabled=False),
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings.database)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
def store(database):
    return SqlAlchemyCredentialStore(database.session_factory, timeout=5.0)


@pytest.fixture
def mailer():
    return RecordingEmailDispatcher()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def services(settings, store, mailer, clock):
    return build_services(settings, store, mailer, clock=clock)


@pytest_asyncio.fixture
async def client(settings, services):
    """HTTP client bound to the app in the test's own event loop."""
    app = create_app(settings, services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


async def make_user(services, email, role=UserRole.CUSTOMER, status=UserStatus.ACTIVE,
                    verified=True, password=TEST_PASSWORD):
    user = User(
        email=email,
        password_hash=services.hasher.hash(password),
        first_name="Test",
        last_name="User",
        role=role,
        status=status,
        is_email_verified=verified,
    )
    return await services.store.create_user(user)


@pytest.fixture
def user_factory(services):
    async def factory(email, **kwargs):
        return await make_user(services, email, **kwargs)
    return factory


@pytest_asyncio.fixture
async def test_user(services):
    """Verified, active customer."""
    return await make_user(services, "test@example.com")


@pytest_asyncio.fixture
async def admin_user(services):
    return await make_user(services, "admin@example.com", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def auth_headers(services, test_user):
    session = await services.sessions.login(test_user.email, TEST_PASSWORD)
    return {"Authorization": f"Bearer {session.access_token}"}


@pytest_asyncio.fixture
async def admin_headers(services, admin_user):
    session = await services.sessions.login(admin_user.email, TEST_PASSWORD)
    return {"Authorization": f"Bearer {session.access_token}"}


@pytest.fixture
def customer_payload():
    return {
        "email": "newuser@example.com",
        "password": "newpassword123",
        "first_name": "New",
        "last_name": "User",
    }


@pytest.fixture
def artisan_payload():
    return {
        "email": "artisan@example.com",
        "password": "artisanpass123",
        "first_name": "Ada",
        "last_name": "Okafor",
        "phone_number": "+2348000000001",
        "business_name": "Ada Plumbing",
        "business_license": "LIC-001",
        "service_categories": ["Plumbing"],
        "service_areas": ["Lagos"],
        "hourly_rate": 25.0,
    }
