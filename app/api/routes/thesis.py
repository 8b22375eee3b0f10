"""Student-side thesis endpoints: submission and own listings."""

import logging

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlmodel import select

from app.api.deps import Principal, Session, Student, json_body, require_student
from app.core.database import store_operation
from app.models.base import utcnow
from app.models.thesis import Thesis, ThesisCreate, ThesisRead
from app.services.validation import clean_prodi, validate_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/thesis", tags=["thesis"])

SubmissionBody = Annotated[ThesisCreate, Depends(json_body(ThesisCreate, after=require_student))]


def _own_theses(student_id: str):
    return (
        select(Thesis)
        .where(Thesis.student_id == student_id)
        .order_by(Thesis.created_at.desc(), Thesis.id.desc())  # type: ignore[union-attr]
    )


@router.post("", response_model=ThesisRead, status_code=status.HTTP_201_CREATED)
async def submit_thesis(user: Student, body: SubmissionBody, session: Session) -> ThesisRead:
    title, doc_url = validate_submission(body.title, body.doc_url)
    prodi = clean_prodi(body.prodi)

    async with store_operation(session, "Gagal mengajukan skripsi"):
        if prodi:
            user.prodi = prodi
            user.updated_at = utcnow()
            session.add(user)

        thesis = Thesis(title=title, doc_url=doc_url, student_id=user.id)
        session.add(thesis)
        await session.commit()
        await session.refresh(thesis)

    logger.info("Thesis %s submitted by %s", thesis.id, user.email)
    return ThesisRead.model_validate(thesis)


@router.get("/me", response_model=ThesisRead | None)
async def get_latest_thesis(user: Principal, session: Session) -> ThesisRead | None:
    """The caller's most recent submission, or null."""
    async with store_operation(session, "Gagal memuat data skripsi"):
        result = await session.execute(_own_theses(user.id).limit(1))
        thesis = result.scalars().first()
    return ThesisRead.model_validate(thesis) if thesis else None


@router.get("/me/all", response_model=list[ThesisRead])
async def list_own_theses(user: Student, session: Session) -> list[ThesisRead]:
    async with store_operation(session, "Gagal memuat data skripsi"):
        result = await session.execute(_own_theses(user.id))
        theses = result.scalars().all()
    return [ThesisRead.model_validate(t) for t in theses]
