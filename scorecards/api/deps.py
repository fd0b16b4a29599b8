from __future__ import annotations

from fastapi import Header, HTTPException

from scorecards.config import settings
from scorecards.db.session import SessionLocal
from scorecards.services.scorecard_service import ScorecardService


def get_scorecard_service() -> ScorecardService:
    return ScorecardService.from_session_factory(SessionLocal)


def require_shared_secret(x_scorecards_secret: str | None = Header(default=None)) -> None:
    """
    v1 security: shared secret header from the workspace backend.
    Header name: X-SCORECARDS-SECRET
    """
    expected = settings.SCORECARDS_SECRET
    if not expected:
        # Fail closed when the secret is not configured
        raise HTTPException(status_code=500, detail="SCORECARDS_SECRET is not configured")

    if not x_scorecards_secret or x_scorecards_secret != expected:
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> int:
    """
    Identity of the caller, forwarded by the authenticating backend.
    Header name: X-USER-ID
    """
    if not x_user_id or not x_user_id.strip().isdigit():
        raise HTTPException(status_code=401, detail="Missing or invalid X-USER-ID")
    return int(x_user_id.strip())
