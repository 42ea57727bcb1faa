"""Domain models for the catalog sync engine.

This module exports all Pydantic models used across the application.
"""

from src.models.category import Category, generate_category_key
from src.models.kind import CATALOG_ACTIONS, ContentKind, SyncJobKind
from src.models.provider import Provider, ProviderStatus
from src.models.stream import (
    STREAM_MODELS,
    LiveStream,
    SeriesStream,
    StreamRecord,
    StreamStatus,
    VodStream,
    generate_stream_key,
)
from src.models.sync_job import JobState, SyncJob, generate_job_id
from src.models.sync_result import (
    CategorySyncResult,
    CategorySyncSummary,
    KindStats,
    ProviderRef,
    ReconcileStats,
    StreamSyncResult,
)

__all__ = [
    "CATALOG_ACTIONS",
    "STREAM_MODELS",
    "Category",
    "CategorySyncResult",
    "CategorySyncSummary",
    "ContentKind",
    "JobState",
    "KindStats",
    "LiveStream",
    "Provider",
    "ProviderRef",
    "ProviderStatus",
    "ReconcileStats",
    "SeriesStream",
    "StreamRecord",
    "StreamStatus",
    "StreamSyncResult",
    "SyncJob",
    "SyncJobKind",
    "VodStream",
    "generate_category_key",
    "generate_job_id",
    "generate_stream_key",
]
