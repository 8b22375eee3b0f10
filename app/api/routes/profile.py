"""Own-profile endpoints, open to every authenticated role."""

import logging

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import Principal, Session, get_current_user, json_body
from app.core.database import store_operation
from app.models.base import utcnow
from app.models.user import ProfileUpdate, UserRead
from app.services.validation import validate_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])

ProfileBody = Annotated[ProfileUpdate, Depends(json_body(ProfileUpdate, after=get_current_user))]


@router.post("", response_model=UserRead)
async def update_profile(user: Principal, body: ProfileBody, session: Session) -> UserRead:
    name, prodi = validate_profile(body.name, body.prodi)

    async with store_operation(session, "Gagal memperbarui profil"):
        user.name = name
        user.prodi = prodi
        user.updated_at = utcnow()
        session.add(user)
        await session.commit()
        await session.refresh(user)

    logger.info("Profile updated for %s", user.email)
    return UserRead.model_validate(user)


@router.get("/me", response_model=UserRead)
async def get_profile(user: Principal) -> UserRead:
    return UserRead.model_validate(user)
