# ============================================================================
# FILE: album_finder/schemas/album.py
# ============================================================================
from pydantic import BaseModel
from typing import Optional, List

class AlbumInfo(BaseModel):
    """Spotify album, shaped like the favorites payload so it can be posted back"""
    album_id: str
    album_name: str
    artist_id: Optional[str] = None
    artist_name: str
    image_url: Optional[str] = None
    spotify_url: Optional[str] = None
    release_date: Optional[str] = None
    total_tracks: Optional[int] = None

class ArtistInfo(BaseModel):
    artist_id: str
    name: str
    image_url: Optional[str] = None
    spotify_url: Optional[str] = None

class AlbumSearchResponse(BaseModel):
    success: bool = True
    artist: ArtistInfo
    count: int
    albums: List[AlbumInfo] = []
