# ============================================================================
# FILE: album_finder/api/router.py
# ============================================================================
from fastapi import APIRouter
from album_finder.api.endpoints import albums, auth, favorites, health

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
api_router.include_router(albums.router, prefix="/albums", tags=["albums"])
api_router.include_router(health.router, tags=["health"])
