"""Business logic services."""

from src.services.batch_reconciler import BatchReconciler
from src.services.category_filter import CategoryExclusionFilter, normalize_category_id
from src.services.record_normalizer import (
    InvalidRecord,
    normalize_category,
    normalize_stream,
)
from src.services.sync_orchestrator import (
    InvalidProviderIdError,
    ProviderNotActiveError,
    ProviderNotFoundError,
    SyncError,
    SyncOrchestrator,
)
from src.services.sync_worker import SyncWorker

__all__ = [
    "BatchReconciler",
    "CategoryExclusionFilter",
    "InvalidProviderIdError",
    "InvalidRecord",
    "ProviderNotActiveError",
    "ProviderNotFoundError",
    "SyncError",
    "SyncOrchestrator",
    "SyncWorker",
    "normalize_category",
    "normalize_category_id",
    "normalize_stream",
]
