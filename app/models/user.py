"""User model: keyed by the identity provider's subject id."""

from enum import StrEnum

from sqlmodel import Field, SQLModel

from app.models.base import CamelSchema, TimestampMixin


class UserRole(StrEnum):
    STUDENT = "STUDENT"
    FACULTY = "FACULTY"
    BLOCKED = "BLOCKED"


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    # Google "sub" claim, stable across email changes
    id: str = Field(primary_key=True, max_length=255)
    email: str = Field(max_length=320, unique=True, nullable=False, index=True)
    name: str = Field(default="", max_length=255)
    role: UserRole = Field(default=UserRole.STUDENT)
    prodi: str | None = Field(default=None, max_length=255)


# ── Pydantic schemas ─────────────────────────────────────────

class UserRead(CamelSchema):
    id: str
    email: str
    name: str
    role: UserRole
    prodi: str | None = None


class ProfileUpdate(CamelSchema):
    name: str = ""
    prodi: str | None = None
