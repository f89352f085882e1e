# ============================================================================
# FILE: album_finder/core/logging.py
# ============================================================================
import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the whole application"""
    from album_finder.config import settings

    level_name = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    # Avoid duplicate handlers when the app is created more than once (tests, reload)
    if any(getattr(h, "_album_finder", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._album_finder = True
    root.addHandler(handler)

    # SQL echo is controlled by DB_ECHO, keep the engine logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
