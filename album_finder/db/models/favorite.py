# ============================================================================
# FILE: album_finder/db/models/favorite.py
# ============================================================================
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from album_finder.db.base import Base, utcnow

class Favorite(Base):
    """An album a user has saved, keyed by the Spotify album id"""
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "album_id", name="uq_favorites_user_album"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    album_id = Column(String(64), nullable=False)  # Spotify album ID
    album_name = Column(String(500), nullable=False)
    artist_id = Column(String(64), nullable=True)
    artist_name = Column(String(500), nullable=False)
    image_url = Column(String, nullable=True)
    spotify_url = Column(String, nullable=True)
    release_date = Column(String(10), nullable=True)  # YYYY, YYYY-MM or YYYY-MM-DD
    total_tracks = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="favorites")
