from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.user import User
from app.services.auth_service import decode_access_token


@dataclass(frozen=True)
class SessionClaims:
    """Verified contents of a session token."""

    user_id: int
    issued_at: datetime | None = None


def _claims_from_token(token: str) -> SessionClaims:
    # Expired, malformed and wrongly-signed tokens all get the same answer.
    try:
        payload = decode_access_token(token)
        user_id = int(payload["userId"])
    except Exception:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    issued_at = payload.get("iat")
    if isinstance(issued_at, (int, float)):
        issued_at = datetime.fromtimestamp(issued_at, tz=timezone.utc)
    else:
        issued_at = None
    return SessionClaims(user_id=user_id, issued_at=issued_at)


def get_session_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(settings.bearer_scheme),
) -> SessionClaims:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
    return _claims_from_token(credentials.credentials)


def get_current_user(
    claims: SessionClaims = Depends(get_session_claims),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == claims.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
