"""FastAPI dependencies for authentication, role gating and request bodies."""

import json
from collections.abc import Awaitable, Callable
from typing import Annotated, Any, TypeVar

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.errors import describe_validation_errors
from app.core.config import Settings
from app.core.database import get_session
from app.core.exceptions import Forbidden, InvalidInput, Unauthenticated
from app.core.security import TokenVerifier
from app.models.user import User, UserRole
from app.services.identity import PrincipalResolver

# Missing / malformed headers are reported as Unauthenticated below
bearer_scheme = HTTPBearer(auto_error=False)

BodyT = TypeVar("BodyT", bound=BaseModel)


def get_identity_verifier(request: Request) -> TokenVerifier:
    """The verifier built at start-up (see ``app.main.create_app``)."""
    return request.app.state.identity_verifier


def get_principal_resolver(request: Request) -> PrincipalResolver:
    return request.app.state.principal_resolver


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_identity_verifier)],
    resolver: Annotated[PrincipalResolver, Depends(get_principal_resolver)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> User:
    """Resolve the bearer token to the caller's refreshed ``User`` row."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    claims = await verifier.verify(credentials.credentials)
    return await resolver.resolve(claims, session)


async def require_student(user: Annotated[User, Depends(get_current_user)]) -> User:
    if user.role != UserRole.STUDENT:
        raise Forbidden("Hanya mahasiswa yang dapat mengakses fitur ini")
    return user


async def require_faculty(user: Annotated[User, Depends(get_current_user)]) -> User:
    if user.role != UserRole.FACULTY:
        raise Forbidden("Hanya dosen yang dapat mengakses fitur ini")
    return user


def get_app_settings(request: Request) -> Settings:
    """The settings the running app was created with."""
    return request.app.state.settings


async def read_json_body(request: Request, model: type[BodyT]) -> BodyT:
    """Decode and validate a JSON body; any failure is ``InvalidInput``.

    An empty body counts as ``{}``, so missing fields are reported by the
    field checks rather than as a decode error.
    """
    raw = await request.body()
    try:
        payload = json.loads(raw) if raw.strip() else {}
    except ValueError:
        raise InvalidInput("Body harus berupa JSON yang valid") from None

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidInput(describe_validation_errors(exc.errors())) from None


def json_body(model: type[BodyT], after: Callable[..., Any]) -> Callable[..., Awaitable[BodyT]]:
    """Dependency that reads ``model`` from the body once ``after`` has passed.

    Routes take their body through this instead of a plain body parameter,
    so authentication and role checks always run before the body is parsed.
    """

    async def dependency(
        request: Request,
        _principal: Annotated[User, Depends(after)],
    ) -> BodyT:
        return await read_json_body(request, model)

    return dependency


# Typed shorthand for use in route signatures
Principal = Annotated[User, Depends(get_current_user)]
Student = Annotated[User, Depends(require_student)]
Faculty = Annotated[User, Depends(require_faculty)]
Session = Annotated[AsyncSession, Depends(get_session)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
