# ============================================================================
# FILE: album_finder/db/base.py
# ============================================================================
from datetime import datetime, timezone
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base shared by all models"""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def import_models() -> None:
    """Register every model on Base.metadata before create_all"""
    from album_finder.db.models import favorite, user  # noqa: F401
