"""Import all models so SQLModel.metadata picks them up."""

from app.models.thesis import (
    ReviewDecision,
    ScheduleRequest,
    Thesis,
    ThesisCreate,
    ThesisRead,
    ThesisStatus,
    ThesisWithStudent,
)
from app.models.user import ProfileUpdate, User, UserRead, UserRole

__all__ = [
    "ProfileUpdate",
    "ReviewDecision",
    "ScheduleRequest",
    "Thesis",
    "ThesisCreate",
    "ThesisRead",
    "ThesisStatus",
    "ThesisWithStudent",
    "User",
    "UserRead",
    "UserRole",
]
