"""Thesis model: a student's submission moving through review."""

from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from app.models.base import CamelSchema, TimestampMixin
from app.models.user import UserRead


class ThesisStatus(StrEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Thesis(TimestampMixin, SQLModel, table=True):
    __tablename__ = "theses"

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(max_length=200, nullable=False)
    doc_url: str = Field(nullable=False)
    student_id: str = Field(foreign_key="users.id", nullable=False, index=True)
    status: ThesisStatus = Field(default=ThesisStatus.PENDING, index=True)

    # Only meaningful while APPROVED; not cleared on later decisions.
    scheduled_at: datetime | None = Field(default=None, nullable=True)


# ── Pydantic schemas ─────────────────────────────────────────

class ThesisCreate(CamelSchema):
    title: str = ""
    doc_url: str = ""
    prodi: str | None = None


class ReviewDecision(CamelSchema):
    decision: str = ""


class ScheduleRequest(CamelSchema):
    date: str = ""


class ThesisRead(CamelSchema):
    id: int
    title: str
    doc_url: str
    student_id: str
    status: ThesisStatus
    scheduled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ThesisWithStudent(ThesisRead):
    student: UserRead
