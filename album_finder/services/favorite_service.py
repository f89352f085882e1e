# ============================================================================
# FILE: album_finder/services/favorite_service.py
# ============================================================================
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from album_finder.core.exceptions import ConflictError, NotFoundError, ValidationError
from album_finder.db.models.favorite import Favorite
from album_finder.schemas.favorite import FavoriteCreate
import logging

logger = logging.getLogger(__name__)

class FavoriteService:
    """Service layer for a user's favorite albums"""

    async def get_user_favorites(self, db: AsyncSession, user_id: int) -> List[Favorite]:
        """Get all favorites for a user, newest first"""
        result = await db.execute(
            select(Favorite)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        )
        return list(result.scalars().all())

    async def get_favorite(self, db: AsyncSession, user_id: int, album_id: str) -> Optional[Favorite]:
        """Get one favorite by album id (scoped to the user)"""
        result = await db.execute(
            select(Favorite).where(Favorite.user_id == user_id, Favorite.album_id == album_id)
        )
        return result.scalars().first()

    async def add_favorite(self, db: AsyncSession, user_id: int, album: FavoriteCreate) -> Favorite:
        """Add an album to the user's favorites"""
        album_id = (album.album_id or "").strip()
        album_name = (album.album_name or "").strip()
        artist_name = (album.artist_name or "").strip()
        if not album_id or not album_name or not artist_name:
            raise ValidationError("Album ID, name, and artist name are required")

        # Fast path only, the (user_id, album_id) constraint is authoritative
        if await self.get_favorite(db, user_id, album_id):
            raise ConflictError("Album already in favorites")

        favorite = Favorite(
            user_id=user_id,
            album_id=album_id,
            album_name=album_name,
            artist_name=artist_name,
            artist_id=album.artist_id,
            image_url=album.image_url,
            spotify_url=album.spotify_url,
            release_date=album.release_date,
            total_tracks=album.total_tracks,
        )
        db.add(favorite)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Album already in favorites")
        except Exception as e:
            await db.rollback()
            logger.error(f"Error adding favorite: {e}")
            raise

        logger.info(f"Favorite added for user {user_id}: {album_id}")
        return favorite

    async def remove_favorite(self, db: AsyncSession, user_id: int, album_id: str) -> Favorite:
        """Remove an album from the user's favorites and return the removed row"""
        favorite = await self.get_favorite(db, user_id, album_id)
        if not favorite:
            raise NotFoundError("Favorite not found")

        try:
            await db.delete(favorite)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error removing favorite: {e}")
            raise

        logger.info(f"Favorite removed for user {user_id}: {album_id}")
        return favorite

# Create singleton instance
favorite_service = FavoriteService()
