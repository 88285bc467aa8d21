from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import bcrypt
from jose import jwt
from jose.exceptions import JWTError
from pydantic import BaseModel

from app.core.config import settings


class SessionUser(BaseModel):
    """What the session remembers about a logged-in user."""
    username: str
    email: Optional[str] = None
    login_history: List[Dict[str, Any]] = []


class SessionData(BaseModel):
    """
    Mutable per-request session. Handlers set or reset ``user``; the session
    middleware notices the change and rewrites the cookie.
    """
    user: Optional[SessionUser] = None
    expires_at: Optional[datetime] = None
    modified: bool = False

    def login(self, user: SessionUser) -> None:
        self.user = user
        self.modified = True

    def reset(self) -> None:
        self.user = None
        self.modified = True


def hash_password(password: str, rounds: int = 10) -> str:
    """Generate a salt with the given cost and hash the password with it."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_session_token(user: SessionUser, expires_at: datetime) -> str:
    to_encode = {
        "sub": user.username,
        "user": user.model_dump(mode="json"),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(to_encode, settings.SESSION_SECRET_KEY, algorithm=settings.SESSION_ALGORITHM)


def read_session_token(token: Optional[str]) -> SessionData:
    """Decode a session cookie. Anything missing, tampered or expired is an anonymous session."""
    if not token:
        return SessionData()
    try:
        payload = jwt.decode(
            token,
            settings.SESSION_SECRET_KEY,
            algorithms=[settings.SESSION_ALGORITHM]
        )
        user = SessionUser(**payload["user"])
    except (JWTError, KeyError, TypeError, ValueError):
        return SessionData()
    expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    return SessionData(user=user, expires_at=expires_at)


def session_expiry(now: Optional[datetime] = None, minutes: Optional[int] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=settings.SESSION_DURATION_MINUTES if minutes is None else minutes)
