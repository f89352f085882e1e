# ============================================================================
# FILE: album_finder/core/spotify_client.py
# Spotify Web API client (client credentials flow) for artist/album lookups
# ============================================================================
import httpx
import time
from typing import Callable, Dict, List, Optional
from album_finder.core.cache import RedisCache
from album_finder.core.exceptions import ExternalServiceError, ServiceUnavailableError
import logging

logger = logging.getLogger(__name__)

TOKEN_URL = "https://accounts.spotify.com/api/token"
API_BASE_URL = "https://api.spotify.com/v1"
TOKEN_CACHE_KEY = "spotify:app_token"
# Refresh the app token this many seconds before Spotify expires it
TOKEN_EXPIRY_MARGIN = 60


class SpotifyClient:
    """
    Async Spotify Web API client
    The app access token is cached in Redis (or in memory when Redis is off)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        cache: RedisCache,
        market: str = "US",
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.cache = cache
        self.market = market
        self.http = http_client or httpx.AsyncClient(timeout=10.0)
        self.clock = clock
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

        if not self.configured:
            logger.warning("Spotify client credentials not configured")

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def close(self) -> None:
        await self.http.aclose()

    async def _fetch_app_token(self) -> str:
        try:
            response = await self.http.post(
                TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Spotify token request failed: {e}")
            raise ExternalServiceError("Spotify authentication failed")

        try:
            data = response.json()
            token = data["access_token"]
            expires_in = int(data.get("expires_in", 3600))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Malformed Spotify token response: {e}")
            raise ExternalServiceError("Spotify authentication failed")

        lifetime = max(expires_in - TOKEN_EXPIRY_MARGIN, 1)
        self._token = token
        self._token_expires_at = self.clock() + lifetime
        await self.cache.set_cache(TOKEN_CACHE_KEY, token, lifetime)
        logger.info("Obtained Spotify app access token")
        return token

    async def get_app_token(self) -> str:
        """Return a valid app token, requesting a new one when needed"""
        if not self.configured:
            raise ServiceUnavailableError("Spotify integration is not configured")

        cached = await self.cache.get_cache(TOKEN_CACHE_KEY)
        if cached:
            return cached
        if self._token and not self.cache.enabled and self.clock() < self._token_expires_at:
            return self._token

        return await self._fetch_app_token()

    async def _get(self, path: str, params: Dict) -> Dict:
        token = await self.get_app_token()
        try:
            response = await self.http.get(
                f"{API_BASE_URL}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
            if response.status_code == 401:
                # Token revoked or expired early, retry once with a fresh one
                await self.cache.delete_cache(TOKEN_CACHE_KEY)
                token = await self._fetch_app_token()
                response = await self.http.get(
                    f"{API_BASE_URL}{path}",
                    params=params,
                    headers={"Authorization": f"Bearer {token}"},
                )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Spotify API error for {path}: {e}")
            raise ExternalServiceError("Spotify request failed")

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Malformed Spotify response for {path}: {e}")
            raise ExternalServiceError("Spotify request failed")

    async def search_artists(self, query: str, limit: int = 1) -> List[Dict]:
        """Search artists by name, best match first"""
        data = await self._get("/search", {"q": query, "type": "artist", "limit": limit})
        return data.get("artists", {}).get("items", [])

    async def get_artist_albums(self, artist_id: str, limit: int = 50) -> List[Dict]:
        """Get the full-length albums of an artist"""
        data = await self._get(
            f"/artists/{artist_id}/albums",
            {"include_groups": "album", "market": self.market, "limit": limit},
        )
        return data.get("items", [])
