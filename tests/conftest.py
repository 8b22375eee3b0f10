"""Shared test fixtures: async SQLite in-memory DB, fake verifier + test client."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# Import all models so metadata is populated
import app.models  # noqa: F401
from app.api.deps import get_identity_verifier
from app.core.database import get_session
from app.core.exceptions import InvalidToken
from app.core.security import IdentityClaims
from app.main import app

STUDENT_TOKEN = "student-token"
OTHER_STUDENT_TOKEN = "other-student-token"
FACULTY_TOKEN = "faculty-token"


class FakeVerifier:
    """Deterministic stand-in for the Google verifier: token → claims."""

    def __init__(self) -> None:
        self.identities: dict[str, IdentityClaims] = {}
        self.calls: list[str] = []

    def register(self, token: str, *, subject: str, email: str, name: str) -> None:
        self.identities[token] = IdentityClaims(subject=subject, email=email, name=name)

    async def verify(self, token: str) -> IdentityClaims:
        self.calls.append(token)
        claims = self.identities.get(token)
        if claims is None:
            raise InvalidToken()
        return claims


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
def verifier() -> FakeVerifier:
    fake = FakeVerifier()
    fake.register(STUDENT_TOKEN, subject="sub-student-1", email="budi@gmail.com", name="Budi")
    fake.register(
        OTHER_STUDENT_TOKEN, subject="sub-student-2", email="sari@yahoo.com", name="Sari"
    )
    fake.register(
        FACULTY_TOKEN, subject="sub-faculty-1", email="dosen@mail.ugm.ac.id", name="Dr. Dosen"
    )
    return fake


@pytest.fixture
async def client(session, verifier) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session and verifier overrides."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_identity_verifier] = lambda: verifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers() -> dict[str, str]:
    return bearer(STUDENT_TOKEN)


@pytest.fixture
def other_student_headers() -> dict[str, str]:
    return bearer(OTHER_STUDENT_TOKEN)


@pytest.fixture
def faculty_headers() -> dict[str, str]:
    return bearer(FACULTY_TOKEN)
