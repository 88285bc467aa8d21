from fastapi import APIRouter, Depends

from app.api.deps import get_auth_service, get_data_service
from app.services.auth_service import AuthService
from app.services.data_service import DataService

router = APIRouter()

@router.get("")
async def health_check(
    data: DataService = Depends(get_data_service),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Health check endpoint that reports whether both stores are open.

    Returns:
        dict: Health status of the API, the data store and the user store
    """
    health_status = {
        "status": "healthy",
        "api": "online",
        "data_store": "online" if data.initialized else "offline",
        "user_store": "online" if auth.initialized else "offline",
    }
    if not (data.initialized and auth.initialized):
        health_status["status"] = "unhealthy"

    return health_status
