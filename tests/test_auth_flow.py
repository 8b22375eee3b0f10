"""Authentication flow: token → principal upsert → role gating."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func
from sqlmodel import select

from app.api.deps import get_principal_resolver
from app.core.security import IdentityClaims
from app.main import app
from app.models.user import User, UserRole
from app.services.identity import DomainPolicy, PrincipalResolver

PROTECTED_ROUTES = [
    ("GET", "/api/profile/me"),
    ("POST", "/api/profile"),
    ("POST", "/api/thesis"),
    ("GET", "/api/thesis/me"),
    ("GET", "/api/thesis/me/all"),
    ("GET", "/api/dosen/pending"),
    ("GET", "/api/dosen/scheduled"),
    ("GET", "/api/dosen/all"),
    ("GET", "/api/dosen/thesis/1"),
    ("PUT", "/api/dosen/review/1"),
    ("PUT", "/api/dosen/schedule/1"),
]


async def _user_count(session) -> int:
    return (await session.execute(select(func.count()).select_from(User))).scalar_one()


@pytest.mark.asyncio
@pytest.mark.parametrize(("method", "path"), PROTECTED_ROUTES)
async def test_invalid_token_rejected_without_writes(client: AsyncClient, session, method, path):
    resp = await client.request(
        method, path, json={}, headers={"Authorization": "Bearer forged-token"}
    )
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid Token"}
    assert await _user_count(session) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(("method", "path"), PROTECTED_ROUTES)
async def test_missing_token_rejected(client: AsyncClient, method, path):
    resp = await client.request(method, path, json={})
    assert resp.status_code == 401
    assert resp.json() == {"error": "No token provided"}


@pytest.mark.asyncio
async def test_first_login_creates_user(client: AsyncClient, student_headers, session):
    resp = await client.get("/api/profile/me", headers=student_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data == {
        "id": "sub-student-1",
        "email": "budi@gmail.com",
        "name": "Budi",
        "role": "STUDENT",
        "prodi": None,
    }
    assert await _user_count(session) == 1


@pytest.mark.asyncio
async def test_faculty_role_from_mail_subdomain(client: AsyncClient, faculty_headers):
    resp = await client.get("/api/profile/me", headers=faculty_headers)
    assert resp.status_code == 200
    assert resp.json()["role"] == "FACULTY"


@pytest.mark.asyncio
async def test_repeat_login_refreshes_claims_without_duplicates(
    client: AsyncClient, verifier, session
):
    """Last claims win for email/name/role; prodi survives; one row only."""
    verifier.register("t1", subject="sub-x", email="x@gmail.com", name="Old Name")
    headers = {"Authorization": "Bearer t1"}

    resp = await client.post("/api/profile", json={"name": "Old Name", "prodi": "Informatika"},
                             headers=headers)
    assert resp.status_code == 200

    verifier.register("t1", subject="sub-x", email="x@mail.ugm.ac.id", name="New Name")
    resp = await client.get("/api/profile/me", headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == "x@mail.ugm.ac.id"
    assert data["name"] == "New Name"
    assert data["role"] == "FACULTY"
    assert data["prodi"] == "Informatika"
    assert await _user_count(session) == 1


@pytest.mark.asyncio
async def test_resolver_is_idempotent(session):
    resolver = PrincipalResolver()
    claims = IdentityClaims(subject="sub-1", email="a@gmail.com", name="A")

    first = await resolver.resolve(claims, session)
    second = await resolver.resolve(claims, session)

    assert first.id == second.id == "sub-1"
    assert second.role == UserRole.STUDENT
    assert await _user_count(session) == 1


@pytest.mark.asyncio
async def test_institutional_policy_blocks_outside_addresses(
    client: AsyncClient, student_headers, session
):
    strict = PrincipalResolver(DomainPolicy(restrict_to_institution=True))
    app.dependency_overrides[get_principal_resolver] = lambda: strict

    resp = await client.get("/api/profile/me", headers=student_headers)
    assert resp.status_code == 403
    assert "email UGM" in resp.json()["error"]

    user = await session.get(User, "sub-student-1")
    assert user is not None
    assert user.role == UserRole.BLOCKED


BODY_ROUTES = [
    ("POST", "/api/profile"),
    ("POST", "/api/thesis"),
    ("PUT", "/api/dosen/review/1"),
    ("PUT", "/api/dosen/schedule/1"),
]


@pytest.mark.asyncio
@pytest.mark.parametrize(("method", "path"), BODY_ROUTES)
async def test_malformed_body_does_not_mask_invalid_token(
    client: AsyncClient, session, method, path
):
    """Authentication is checked before the body is even decoded."""
    resp = await client.request(
        method, path, content=b"{not json",
        headers={"Authorization": "Bearer forged-token", "Content-Type": "application/json"},
    )
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid Token"}
    assert await _user_count(session) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(("method", "path"), BODY_ROUTES)
async def test_malformed_body_does_not_mask_missing_token(client: AsyncClient, method, path):
    resp = await client.request(
        method, path, content=b"{not json", headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 401
