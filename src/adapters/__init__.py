"""External service adapters."""

from src.adapters.firestore_client import FirestoreClient, StoreUnavailableError
from src.adapters.tasks_client import RetryPolicy, TasksClient
from src.adapters.xtream_client import (
    CredentialError,
    FetchError,
    ProviderCredentials,
    XtreamClient,
    XtreamError,
)

__all__ = [
    "CredentialError",
    "FetchError",
    "FirestoreClient",
    "ProviderCredentials",
    "RetryPolicy",
    "StoreUnavailableError",
    "TasksClient",
    "XtreamClient",
    "XtreamError",
]
