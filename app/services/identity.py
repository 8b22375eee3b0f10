"""Role policy and principal resolution.

Every authenticated request refreshes the caller's ``User`` row from the
token claims, so email / name / role always reflect the latest token.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.database import store_operation
from app.core.exceptions import Forbidden
from app.core.security import IdentityClaims
from app.models.base import utcnow
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainPolicy:
    """Which email domains map to which role."""

    faculty_domain: str = "mail.ugm.ac.id"
    institution_domain: str = "ugm.ac.id"
    restrict_to_institution: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "DomainPolicy":
        return cls(
            faculty_domain=settings.faculty_email_domain,
            institution_domain=settings.institution_email_domain,
            restrict_to_institution=settings.restrict_to_institution,
        )


DEFAULT_POLICY = DomainPolicy()


def email_to_role(email: str, policy: DomainPolicy = DEFAULT_POLICY) -> UserRole:
    """Derive a role from an email address.

    Open policy: the faculty mail subdomain is FACULTY, anything else is
    STUDENT. Institutional policy: the faculty mail subdomain holds student
    accounts, the bare institution domain is FACULTY and every other
    address is BLOCKED.
    """
    address = email.strip().lower()

    if not policy.restrict_to_institution:
        if address.endswith("@" + policy.faculty_domain.lower()):
            return UserRole.FACULTY
        return UserRole.STUDENT

    if address.endswith("@" + policy.faculty_domain.lower()):
        return UserRole.STUDENT
    if address.endswith("@" + policy.institution_domain.lower()):
        return UserRole.FACULTY
    return UserRole.BLOCKED


class PrincipalResolver:
    """Turns verified claims into the persisted ``User`` acting on a request."""

    def __init__(self, policy: DomainPolicy = DEFAULT_POLICY) -> None:
        self.policy = policy

    async def resolve(self, claims: IdentityClaims, session: AsyncSession) -> User:
        role = email_to_role(claims.email, self.policy)

        async with store_operation(session, "Gagal memuat data pengguna"):
            user = await session.get(User, claims.subject)
            if user is None:
                user = User(
                    id=claims.subject,
                    email=claims.email,
                    name=claims.name,
                    role=role,
                    prodi=None,
                )
                logger.info("Registered new %s account %s", role, claims.email)
            else:
                user.email = claims.email
                user.name = claims.name
                user.role = role
                user.updated_at = utcnow()
            session.add(user)
            await session.commit()
            await session.refresh(user)

        if user.role == UserRole.BLOCKED:
            logger.warning("Blocked sign-in attempt from %s", user.email)
            raise Forbidden("Akses Ditolak: Harap gunakan email UGM.")
        return user
