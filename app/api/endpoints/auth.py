import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from app.api.deps import (
    ensure_login,
    get_auth_service,
    get_session,
    parse_form,
    render,
    status_for,
)
from app.core.config import settings
from app.core.security import SessionData, SessionUser
from app.schemas.user import UserCredentials, UserRegistration
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/login")
async def login_form(request: Request):
    return render(request, "login.html", title="Login")


@router.post("/login")
async def login(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
    session: SessionData = Depends(get_session),
):
    """
    Check the submitted credentials and start a session.

    The User-Agent header is recorded in the user's login history.
    """
    parsed = await parse_form(request, UserCredentials)
    if not parsed.ok:
        return render(request, "login.html", status_code=status_for(parsed.kind), title="Login",
                      errorMessage="User name and password are required")

    credentials = parsed.value.model_copy(update={"user_agent": request.headers.get("user-agent")})
    result = await auth.check_user(credentials)
    if not result.ok:
        logger.info(f"Login failed for {credentials.username}: {result.reason}")
        return render(request, "login.html", title="Login",
                      errorMessage=result.reason, username=credentials.username)

    user = result.value
    session.login(SessionUser(
        username=user.username,
        email=user.email,
        login_history=[
            event.model_dump(mode="json")
            for event in user.login_history[-settings.SESSION_HISTORY_LIMIT:]
        ],
    ))
    return RedirectResponse("/people", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/logout")
async def logout(session: SessionData = Depends(get_session)):
    session.reset()
    return RedirectResponse("/", status_code=status.HTTP_302_FOUND)


@router.get("/userHistory")
async def user_history(request: Request, user: SessionUser = Depends(ensure_login)):
    return render(request, "userHistory.html", title="History")


@router.get("/register")
async def register_form(request: Request):
    return render(request, "register.html", title="Register")


@router.post("/register")
async def register(request: Request, auth: AuthService = Depends(get_auth_service)):
    parsed = await parse_form(request, UserRegistration)
    if not parsed.ok:
        return render(request, "register.html", status_code=status_for(parsed.kind),
                      title="Register", errorMessage=parsed.reason)

    result = await auth.register_user(parsed.value)
    if result.ok:
        return render(request, "register.html", title="Register", successMessage="User created")
    return render(request, "register.html", title="Register",
                  errorMessage=result.reason, username=parsed.value.username)
