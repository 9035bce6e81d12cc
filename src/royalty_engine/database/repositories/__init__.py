"""
Royalty Engine Repository Layer
Data access layer with async CRUD operations
"""

from .base import BaseRepository, RepositoryError, ConflictError
from .work_repository import WorkRepository
from .pass_repository import PassRepository
from .play_repository import PlayRepository, PreviewRepository

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "ConflictError",
    "WorkRepository",
    "PassRepository",
    "PlayRepository",
    "PreviewRepository"
]
