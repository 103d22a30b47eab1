import os

# Settings are read once per process; these must be set before src is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-jwt-signing")
os.environ.setdefault("ENVIRONMENT", "local")
os.environ.setdefault("IS_TESTING", "true")
os.environ.setdefault("PAYMENT_GATEWAY", "real")

from datetime import timedelta  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from src.dependencies import get_event_publisher  # noqa: E402
from src.education.domain.entities import TeachingSession  # noqa: E402
from src.education.infrastructure.repositories import SessionRepository  # noqa: E402
from src.identity.domain.entities.user import User  # noqa: E402
from src.identity.infrastructure.persistence.repositories.user_repository import UserRepository  # noqa: E402
from src.main import app  # noqa: E402
from src.shared.infrastructure.database.session import (  # noqa: E402
    dispose_engine,
    get_session_factory,
    init_models,
)
from src.shared.roles import Role  # noqa: E402
from src.shared.utils import utcnow  # noqa: E402
from tests.helpers import register, session_payload  # noqa: E402


@pytest.fixture
async def database():
    await init_models(drop=True)
    yield
    await dispose_engine()


@pytest.fixture
async def db_session(database):
    async with get_session_factory()() as session:
        yield session


@pytest.fixture
def published():
    """Captures committed domain events instead of dispatching them."""
    events = []
    app.dependency_overrides[get_event_publisher] = lambda: events.extend
    yield events
    app.dependency_overrides.pop(get_event_publisher, None)


@pytest.fixture
async def app_client(database, published):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def tutor(app_client):
    return await register(app_client, "tina@tut.com")


@pytest.fixture
async def student(app_client):
    return await register(app_client, "sam@std.com", phone="+15550001111")


@pytest.fixture
async def admin(app_client):
    return await register(app_client, "ada@adm.com")


@pytest.fixture
async def teaching_session(app_client, tutor):
    r = await app_client.post("/api/sessions", json=session_payload(), headers=tutor["headers"])
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.fixture
def make_user(db_session):
    async def _make(email: str, role: Role = Role.STUDENT) -> User:
        user = await UserRepository(db_session).add(
            User(email=email, password_hash="x", first_name="Test", last_name="User", role=role)
        )
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_session(db_session):
    async def _make(tutor: User, max_students: int = 2) -> TeachingSession:
        start = utcnow() + timedelta(days=1)
        session = await SessionRepository(db_session).add(
            TeachingSession.create(
                tutor_id=tutor.id,
                title="Physics lab",
                topic="Optics",
                start_time=start,
                end_time=start + timedelta(hours=1),
                max_students=max_students,
            )
        )
        await db_session.commit()
        return session

    return _make
