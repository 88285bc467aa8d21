from fastapi import APIRouter

from app.api.endpoints import auth, cars, echo, health, pages, people, pictures, stores

# Create API router
api_router = APIRouter()

# Include endpoint routers with appropriate prefixes and tags
api_router.include_router(pages.router, tags=["pages"])
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(people.router, tags=["people"])
api_router.include_router(cars.router, tags=["cars"])
api_router.include_router(stores.router, tags=["stores"])
api_router.include_router(pictures.router, tags=["pictures"])
api_router.include_router(echo.router, prefix="/test", tags=["test"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
