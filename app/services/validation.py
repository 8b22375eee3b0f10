"""Input validation for submission, review, scheduling and profile bodies.

All checks run before any store call and raise ``InvalidInput``.
"""

import re
from datetime import datetime, timezone

from app.core.exceptions import InvalidInput
from app.models.thesis import ThesisStatus

TITLE_MIN_LENGTH = 10
TITLE_MAX_LENGTH = 200
NAME_MAX_LENGTH = 100
PRODI_MAX_LENGTH = 100

_DOC_URL_RE = re.compile(r"^https?://.+")


def validate_submission(title: str, doc_url: str) -> tuple[str, str]:
    """Return the trimmed title and document URL."""
    title = title.strip()
    doc_url = doc_url.strip()

    if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        raise InvalidInput(
            f"Judul harus terdiri dari {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH} karakter"
        )
    if not _DOC_URL_RE.match(doc_url):
        raise InvalidInput("Link dokumen harus berupa URL http(s) yang valid")
    return title, doc_url


def validate_decision(decision: str) -> ThesisStatus:
    try:
        return ThesisStatus(decision)
    except ValueError:
        allowed = ", ".join(s.value for s in ThesisStatus)
        raise InvalidInput(f"Keputusan harus salah satu dari: {allowed}") from None


def parse_schedule_date(raw: str, now: datetime) -> datetime:
    """Parse an ISO 8601 date / datetime into a naive UTC instant.

    Date-only values mean midnight UTC. ``now`` is naive UTC; the parsed
    instant must be strictly later.
    """
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except (ValueError, AttributeError):
        raise InvalidInput("Format tanggal tidak valid") from None

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except OverflowError:
            raise InvalidInput("Tanggal di luar rentang yang didukung") from None

    if parsed <= now:
        raise InvalidInput("Tanggal sidang harus di masa depan")
    return parsed


def clean_prodi(prodi: str | None) -> str | None:
    """Trim a program name; blank means "not set"."""
    if prodi is None:
        return None
    prodi = prodi.strip()
    if len(prodi) > PRODI_MAX_LENGTH:
        raise InvalidInput(f"Prodi maksimal {PRODI_MAX_LENGTH} karakter")
    return prodi or None


def validate_profile(name: str, prodi: str | None) -> tuple[str, str | None]:
    name = name.strip()
    if not name:
        raise InvalidInput("Nama wajib diisi")
    if len(name) > NAME_MAX_LENGTH:
        raise InvalidInput(f"Nama maksimal {NAME_MAX_LENGTH} karakter")
    return name, clean_prodi(prodi)
