# ============================================================================
# FILE: album_finder/api/endpoints/favorites.py
# ============================================================================
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from album_finder.db.session import get_db
from album_finder.api.dependencies import require_current_user
from album_finder.schemas.favorite import (
    FavoriteCreate,
    FavoriteListResponse,
    FavoriteResponse,
    FavoriteCheckResponse,
)
from album_finder.schemas.user import TokenData
from album_finder.services.favorite_service import favorite_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=FavoriteListResponse)
async def get_my_favorites(
    db: AsyncSession = Depends(get_db),
    current_user: TokenData = Depends(require_current_user)
):
    """
    Get all favorite albums for the current user, newest first
    """
    favorites = await favorite_service.get_user_favorites(db, current_user.id)
    return {"count": len(favorites), "favorites": favorites}

@router.post("", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    album: FavoriteCreate,
    db: AsyncSession = Depends(get_db),
    current_user: TokenData = Depends(require_current_user)
):
    """
    Add an album to the current user's favorites
    """
    favorite = await favorite_service.add_favorite(db, current_user.id, album)
    return {"message": "Favorite added successfully", "favorite": favorite}

@router.delete("/{album_id}", response_model=FavoriteResponse)
async def remove_favorite(
    album_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: TokenData = Depends(require_current_user)
):
    """
    Remove an album from the current user's favorites
    """
    favorite = await favorite_service.remove_favorite(db, current_user.id, album_id)
    return {"message": "Favorite removed successfully", "favorite": favorite}

@router.get("/check/{album_id}", response_model=FavoriteCheckResponse)
async def check_favorite(
    album_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: TokenData = Depends(require_current_user)
):
    """
    Check whether an album is in the current user's favorites
    """
    favorite = await favorite_service.get_favorite(db, current_user.id, album_id)
    return {"isFavorite": favorite is not None, "favorite": favorite}
