# ============================================================================
# FILE: album_finder/services/album_service.py
# ============================================================================
from typing import Dict, Optional
from album_finder.core.cache import RedisCache
from album_finder.core.exceptions import NotFoundError
from album_finder.core.spotify_client import SpotifyClient
import logging

logger = logging.getLogger(__name__)

def _first_image(item: Dict) -> Optional[str]:
    images = item.get("images") or []
    return images[0].get("url") if images else None

class AlbumService:
    """Service layer for Spotify catalog lookups"""

    def __init__(self, spotify: SpotifyClient, cache: RedisCache, cache_expire: int = 3600):
        self.spotify = spotify
        self.cache = cache
        self.cache_expire = cache_expire

    def format_album(self, album: Dict) -> Dict:
        """Shape a Spotify album like the favorites payload"""
        artists = album.get("artists") or [{}]
        return {
            "album_id": album.get("id"),
            "album_name": album.get("name"),
            "artist_id": artists[0].get("id"),
            "artist_name": artists[0].get("name") or "Unknown",
            "image_url": _first_image(album),
            "spotify_url": (album.get("external_urls") or {}).get("spotify"),
            "release_date": album.get("release_date"),
            "total_tracks": album.get("total_tracks"),
        }

    async def find_artist_albums(self, query: str) -> Dict:
        """
        Find the best matching artist and list their albums
        Results are cached in Redis for performance

        Args:
            query: Artist name as typed by the user

        Returns:
            Dict with 'artist', 'count' and 'albums' keys
        """
        query = query.strip()
        cache_key = f"albums:{query.lower()}"

        cached = await self.cache.get_cache(cache_key)
        if cached:
            logger.info(f"Cache hit for album search: {query}")
            return cached

        artists = await self.spotify.search_artists(query, limit=1)
        if not artists:
            raise NotFoundError("Artist not found")

        artist = artists[0]
        albums = await self.spotify.get_artist_albums(artist["id"])

        response_data = {
            "artist": {
                "artist_id": artist["id"],
                "name": artist.get("name"),
                "image_url": _first_image(artist),
                "spotify_url": (artist.get("external_urls") or {}).get("spotify"),
            },
            "count": len(albums),
            "albums": [self.format_album(a) for a in albums],
        }

        await self.cache.set_cache(cache_key, response_data, self.cache_expire)
        logger.info(f"Found {len(albums)} albums for artist {artist.get('name')}")
        return response_data
