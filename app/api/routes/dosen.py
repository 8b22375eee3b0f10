"""Faculty (dosen) endpoints: review queues, decisions and scheduling."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.deps import AppSettings, Faculty, Session, json_body, require_faculty
from app.core.database import store_operation
from app.core.exceptions import NotFound
from app.models.base import utcnow
from app.models.thesis import (
    ReviewDecision,
    ScheduleRequest,
    Thesis,
    ThesisRead,
    ThesisStatus,
    ThesisWithStudent,
)
from app.models.user import User, UserRead
from app.services.validation import parse_schedule_date, validate_decision

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dosen", tags=["dosen"])

# Thesis ids are int4 serials; anything outside cannot exist
MAX_THESIS_ID = 2**31 - 1

ReviewBody = Annotated[ReviewDecision, Depends(json_body(ReviewDecision, after=require_faculty))]
ScheduleBody = Annotated[ScheduleRequest, Depends(json_body(ScheduleRequest, after=require_faculty))]


def _with_student():
    return select(Thesis, User).join(User, Thesis.student_id == User.id)


def _to_read(thesis: Thesis, student: User) -> ThesisWithStudent:
    return ThesisWithStudent(
        **ThesisRead.model_validate(thesis).model_dump(),
        student=UserRead.model_validate(student),
    )


async def _list(session: AsyncSession, stmt) -> list[ThesisWithStudent]:
    async with store_operation(session, "Gagal memuat data skripsi"):
        rows = (await session.execute(stmt)).all()
    return [_to_read(thesis, student) for thesis, student in rows]


def _ensure_storable_id(thesis_id: int) -> None:
    if not 1 <= thesis_id <= MAX_THESIS_ID:
        raise NotFound("Skripsi tidak ditemukan")


async def _get_or_404(thesis_id: int, session: AsyncSession) -> Thesis:
    _ensure_storable_id(thesis_id)
    thesis = await session.get(Thesis, thesis_id)
    if thesis is None:
        raise NotFound("Skripsi tidak ditemukan")
    return thesis


# ── Queues ───────────────────────────────────────────────────

@router.get("/pending", response_model=list[ThesisWithStudent])
async def pending_queue(
    user: Faculty, session: Session, settings: AppSettings
) -> list[ThesisWithStudent]:
    """Oldest- or newest-first PENDING submissions for the dashboard widget."""
    if settings.review_queue_order == "asc":
        order = (Thesis.created_at.asc(), Thesis.id.asc())  # type: ignore[union-attr]
    else:
        order = (Thesis.created_at.desc(), Thesis.id.desc())  # type: ignore[union-attr]

    stmt = (
        _with_student()
        .where(Thesis.status == ThesisStatus.PENDING)
        .order_by(*order)
        .limit(settings.review_queue_limit)
    )
    return await _list(session, stmt)


@router.get("/scheduled", response_model=list[ThesisWithStudent])
async def scheduled_queue(
    user: Faculty, session: Session, settings: AppSettings
) -> list[ThesisWithStudent]:
    """Upcoming defenses, soonest first."""
    stmt = (
        _with_student()
        .where(
            Thesis.status == ThesisStatus.APPROVED,
            Thesis.scheduled_at.is_not(None),  # type: ignore[union-attr]
        )
        .order_by(Thesis.scheduled_at.asc())  # type: ignore[union-attr]
        .limit(settings.review_queue_limit)
    )
    return await _list(session, stmt)


@router.get("/all", response_model=list[ThesisWithStudent])
async def all_theses(user: Faculty, session: Session) -> list[ThesisWithStudent]:
    stmt = _with_student().order_by(
        Thesis.created_at.desc(), Thesis.id.desc()  # type: ignore[union-attr]
    )
    return await _list(session, stmt)


@router.get("/thesis/{thesis_id}", response_model=ThesisWithStudent)
async def get_thesis(thesis_id: int, user: Faculty, session: Session) -> ThesisWithStudent:
    _ensure_storable_id(thesis_id)
    async with store_operation(session, "Gagal memuat detail skripsi"):
        row = (await session.execute(_with_student().where(Thesis.id == thesis_id))).first()
    if row is None:
        raise NotFound("Skripsi tidak ditemukan")
    thesis, student = row
    return _to_read(thesis, student)


# ── Decisions ────────────────────────────────────────────────

@router.put("/review/{thesis_id}", response_model=ThesisRead)
async def review_thesis(
    thesis_id: int,
    user: Faculty,
    body: ReviewBody,
    session: Session,
) -> ThesisRead:
    decision = validate_decision(body.decision)

    async with store_operation(session, "Gagal memperbarui status skripsi"):
        thesis = await _get_or_404(thesis_id, session)
        # scheduled_at is left as-is whatever the decision
        thesis.status = decision
        thesis.updated_at = utcnow()
        session.add(thesis)
        await session.commit()
        await session.refresh(thesis)

    logger.info("Thesis %s set to %s by %s", thesis.id, decision, user.email)
    return ThesisRead.model_validate(thesis)


@router.put("/schedule/{thesis_id}", response_model=ThesisRead)
async def schedule_defense(
    thesis_id: int,
    user: Faculty,
    body: ScheduleBody,
    session: Session,
) -> ThesisRead:
    """Schedule a defense; scheduling always approves the thesis."""
    scheduled_at = parse_schedule_date(body.date, now=utcnow())

    async with store_operation(session, "Gagal menjadwalkan sidang"):
        thesis = await _get_or_404(thesis_id, session)
        thesis.scheduled_at = scheduled_at
        thesis.status = ThesisStatus.APPROVED
        thesis.updated_at = utcnow()
        session.add(thesis)
        await session.commit()
        await session.refresh(thesis)

    logger.info("Thesis %s scheduled for %s by %s", thesis.id, scheduled_at.isoformat(), user.email)
    return ThesisRead.model_validate(thesis)
