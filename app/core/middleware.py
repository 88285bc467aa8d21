from datetime import datetime, timedelta, timezone
from typing import Callable
import logging

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.security import create_session_token, read_session_token, session_expiry

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Cookie-backed session.

    The cookie holds a signed token with the logged-in user. It lives for
    SESSION_DURATION_MINUTES; a request arriving when less than
    SESSION_ACTIVE_DURATION_MINUTES is left extends it by that amount.
    Handlers see the session as ``request.state.session``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        cookie_name = settings.SESSION_COOKIE_NAME
        session = read_session_token(request.cookies.get(cookie_name))
        request.state.session = session

        response = await call_next(request)

        now = datetime.now(timezone.utc)
        active = timedelta(minutes=settings.SESSION_ACTIVE_DURATION_MINUTES)

        if session.modified and session.user is None:
            response.delete_cookie(cookie_name)
            return response

        if session.user is None:
            if cookie_name in request.cookies:
                # Expired or unreadable cookie
                response.delete_cookie(cookie_name)
            return response

        if session.modified:
            expires_at = session_expiry(now)
        elif session.expires_at is not None and session.expires_at - now < active:
            expires_at = session.expires_at + active
            logger.debug(f"Extending session for {session.user.username}")
        else:
            return response

        response.set_cookie(
            cookie_name,
            create_session_token(session.user, expires_at),
            max_age=int((expires_at - now).total_seconds()),
            httponly=True,
            samesite="lax",
        )
        return response


def add_middleware(app: FastAPI) -> None:
    """Add all middleware to the FastAPI application."""
    app.add_middleware(SessionMiddleware)
