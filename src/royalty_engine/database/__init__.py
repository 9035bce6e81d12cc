"""
Royalty Engine Database Module
Exports database models, connection management, and Base
"""

from .connection import Base, DatabaseManager, database_manager
from .models import (
    Work,
    AccessPass,
    PlayRecord,
    PreviewPlay
)

__all__ = [
    "Base",
    "DatabaseManager",
    "database_manager",
    "Work",
    "AccessPass",
    "PlayRecord",
    "PreviewPlay"
]
