# ============================================================================
# FILE: album_finder/api/endpoints/albums.py
# ============================================================================
from fastapi import APIRouter, Depends, Query
from album_finder.api.dependencies import get_album_service
from album_finder.schemas.album import AlbumSearchResponse
from album_finder.services.album_service import AlbumService

router = APIRouter()

@router.get("/search", response_model=AlbumSearchResponse)
async def search_albums(
    q: str = Query(..., min_length=1, description="Artist name"),
    album_service: AlbumService = Depends(get_album_service)
):
    """
    Look up an artist on Spotify and list their albums
    Available to all users (authenticated and anonymous)
    """
    return await album_service.find_artist_albums(q)
