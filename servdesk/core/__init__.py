"""Core app configuration, database, and error taxonomy."""

from servdesk.core.config import get_settings, settings
from servdesk.core.database import atomic, get_db

__all__ = ["atomic", "get_settings", "settings", "get_db"]
