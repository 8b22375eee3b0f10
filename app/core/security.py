"""Security utilities: Google ID-token verification."""

import logging
from dataclasses import dataclass
from typing import Protocol

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.exceptions import InvalidToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityClaims:
    """Verified claims extracted from an identity token."""

    subject: str
    email: str
    name: str


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> IdentityClaims: ...


class GoogleIdentityVerifier:
    """Verifies Google-issued ID tokens against Google's signing keys.

    One instance is built at start-up and shared by every request; it holds
    the expected audience and a pooled HTTP session used to fetch the
    provider certificates.
    """

    def __init__(self, client_id: str, clock_skew_seconds: int = 0) -> None:
        self.client_id = client_id
        self.clock_skew_seconds = clock_skew_seconds
        self._transport = google_requests.Request(session=requests.Session())

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleIdentityVerifier":
        return cls(
            client_id=settings.google_client_id,
            clock_skew_seconds=settings.token_clock_skew_seconds,
        )

    async def verify(self, token: str) -> IdentityClaims:
        # Certificate fetch + RSA check are blocking
        payload = await run_in_threadpool(self._decode, token)
        return claims_from_payload(payload)

    def _decode(self, token: str) -> dict:
        if not self.client_id:
            logger.error("GOOGLE_CLIENT_ID is not configured; rejecting token")
            raise InvalidToken()
        try:
            return id_token.verify_oauth2_token(
                token,
                self._transport,
                audience=self.client_id,
                clock_skew_in_seconds=self.clock_skew_seconds,
            )
        except (ValueError, GoogleAuthError) as exc:
            logger.warning("Auth Error: %s", exc)
            raise InvalidToken() from exc


def claims_from_payload(payload: dict) -> IdentityClaims:
    """Pull subject / email / display name out of a verified token payload."""
    email = payload.get("email")
    subject = payload.get("sub")
    if not email or not subject:
        raise InvalidToken()
    if payload.get("email_verified") is False:
        raise InvalidToken("Email belum terverifikasi")

    name = payload.get("name") or email.split("@", 1)[0]
    return IdentityClaims(subject=str(subject), email=email, name=name)
