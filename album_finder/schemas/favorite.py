# ============================================================================
# FILE: album_finder/schemas/favorite.py
# ============================================================================
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

class FavoriteCreate(BaseModel):
    """
    Schema for adding an album to favorites

    album_id, album_name and artist_name are required; the service checks
    them so a missing field gets the same message as a blank one.
    Lengths match the favorites table columns.
    """
    album_id: Optional[str] = Field(None, max_length=64)
    album_name: Optional[str] = Field(None, max_length=500)
    artist_name: Optional[str] = Field(None, max_length=500)
    artist_id: Optional[str] = Field(None, max_length=64)
    image_url: Optional[str] = None
    spotify_url: Optional[str] = None
    release_date: Optional[str] = Field(None, max_length=10)
    total_tracks: Optional[int] = None

class FavoriteOut(BaseModel):
    """Schema for a stored favorite"""
    id: int
    user_id: int
    album_id: str
    album_name: str
    artist_id: Optional[str] = None
    artist_name: str
    image_url: Optional[str] = None
    spotify_url: Optional[str] = None
    release_date: Optional[str] = None
    total_tracks: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

class FavoriteListResponse(BaseModel):
    success: bool = True
    count: int
    favorites: List[FavoriteOut] = []

class FavoriteResponse(BaseModel):
    success: bool = True
    message: str
    favorite: FavoriteOut

class FavoriteCheckResponse(BaseModel):
    success: bool = True
    isFavorite: bool
    favorite: Optional[FavoriteOut] = None
