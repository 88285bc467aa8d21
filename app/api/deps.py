"""
Shared dependencies for the page routers: store handles, the login guard
and template rendering.
"""

from typing import Any, Optional, Type, TypeVar

from fastapi import Depends, Request, status
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ValidationError
from starlette.responses import Response

from app.core.config import settings
from app.core.security import SessionData, SessionUser
from app.services.auth_service import AuthService
from app.services.data_service import DataService
from app.services.picture_service import PictureService
from app.services.result import ErrorKind, Result

M = TypeVar("M", bound=BaseModel)

templates = Jinja2Templates(directory=settings.TEMPLATES_DIR)

STATUS_FOR_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STORE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class LoginRequired(Exception):
    """Raised by ensure_login; turned into a redirect to /login."""


def get_data_service(request: Request) -> DataService:
    return request.app.state.data_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_picture_service(request: Request) -> PictureService:
    return request.app.state.picture_service


def get_session(request: Request) -> SessionData:
    session = getattr(request.state, "session", None)
    if session is None:
        session = SessionData()
        request.state.session = session
    return session


def ensure_login(session: SessionData = Depends(get_session)) -> SessionUser:
    if session.user is None:
        raise LoginRequired()
    return session.user


def status_for(kind: Optional[ErrorKind]) -> int:
    return STATUS_FOR_KIND.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def active_route(request: Request) -> str:
    path = request.url.path
    return "/" if path == "/" else path.rstrip("/")


def render(request: Request, name: str, status_code: int = 200, **context: Any) -> Response:
    """Render a page with the session and the active route available to the layout."""
    context.setdefault("title", settings.PROJECT_NAME)
    context["session"] = get_session(request)
    context["active_route"] = active_route(request)
    return templates.TemplateResponse(request, name, context, status_code=status_code)


async def parse_form(request: Request, schema: Type[M]) -> Result[M]:
    """Validate a submitted form against a schema."""
    form = await request.form()
    data = {key: value for key, value in form.items() if isinstance(value, str)}
    try:
        return Result.success(schema.model_validate(data))
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        return Result.failure(f"Invalid value for: {fields}", ErrorKind.VALIDATION)


def render_list(request: Request, name: str, key: str, result: Result, title: str) -> Response:
    """
    Render a listing page from a lookup result.

    An empty successful lookup and a NOT_FOUND failure both show as
    information; any other failure shows as an error.
    """
    if result.ok:
        if result.value:
            return render(request, name, title=title, **{key: result.value})
        return render(request, name, title=title, information="no results")
    if result.kind == ErrorKind.NOT_FOUND:
        return render(request, name, title=title, information=result.reason)
    return render(request, name, status_code=status_for(result.kind), title=title, errorMessage=result.reason)
