import logging
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.api import api_router
from app.api.deps import LoginRequired
from app.core.config import settings
from app.core.middleware import add_middleware
from app.services.auth_service import AuthService
from app.services.data_service import build_data_service
from app.services.picture_service import PictureService

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="People, cars and stores registry with login and picture uploads",
    version="0.1.0",
)

add_middleware(app)

# Include routers
app.include_router(api_router)

# Uploaded pictures are served as-is
app.mount(
    "/pictures/uploaded",
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploaded-pictures",
)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse("/login", status_code=302)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return PlainTextResponse("Page Not Found", status_code=404)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


@app.on_event("startup")
async def startup_event():
    """
    Open the data store, then the user store. If either fails the exception
    aborts startup, so the server never accepts requests without them.
    """
    logger.info("Starting registry service...")
    state = app.state
    if not hasattr(state, "data_service"):
        state.data_service = build_data_service(settings)
    if not hasattr(state, "auth_service"):
        state.auth_service = AuthService(settings.AUTH_DATABASE_URL, settings.BCRYPT_ROUNDS)
    if not hasattr(state, "picture_service"):
        state.picture_service = PictureService(settings.UPLOAD_DIR)

    for name, service in (("data", state.data_service), ("auth", state.auth_service)):
        if service.initialized:
            continue
        result = await service.initialize()
        if not result.ok:
            logger.error(f"unable to start server: {result.reason}")
            raise RuntimeError(f"{name} store failed to initialize: {result.reason}")

    state.picture_service.ensure_directory()
    logger.info(f"Registry service ready ({settings.DATA_BACKEND} data store)")


@app.on_event("shutdown")
async def shutdown_event():
    for name in ("data_service", "auth_service"):
        service = getattr(app.state, name, None)
        if service is not None:
            await service.close()
    logger.info("Registry service stopped")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)
