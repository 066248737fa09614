"""Database module for washrelay persistence."""

from washrelay.db.engine import close_db, get_session, init_db
from washrelay.db.models import Machine

__all__ = [
    "close_db",
    "get_session",
    "init_db",
    "Machine",
]
