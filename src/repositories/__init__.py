"""Repository layer for Firestore data access.

This module exports all repository classes for data persistence.
"""

from src.repositories.base import BaseRepository
from src.repositories.category_repo import CategoryRepository
from src.repositories.job_repo import LockOutcome, SyncJobRepository
from src.repositories.provider_repo import ProviderRepository
from src.repositories.stream_repo import (
    LiveStreamRepository,
    SeriesStreamRepository,
    StreamRepository,
    VodStreamRepository,
    build_stream_repositories,
)

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "LiveStreamRepository",
    "LockOutcome",
    "ProviderRepository",
    "SeriesStreamRepository",
    "StreamRepository",
    "SyncJobRepository",
    "VodStreamRepository",
    "build_stream_repositories",
]
