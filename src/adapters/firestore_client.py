"""Firestore database client."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore  # type: ignore[attr-defined]
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.bulk_writer import BulkWriterOptions, SendMode

# Errors that mean the store itself could not be reached
_UNAVAILABLE_ERRORS = (
    gcp_exceptions.ServiceUnavailable,
    gcp_exceptions.DeadlineExceeded,
    gcp_exceptions.RetryError,
)


class StoreUnavailableError(Exception):
    """Raised when Firestore cannot be reached."""


@dataclass
class BulkWriteOutcome:
    """Result of a non-atomic bulk write.

    Attributes:
        written: Document IDs written successfully.
        failed: Document ID to error message for rejected writes.
    """

    written: set[str] = field(default_factory=set)
    failed: dict[str, str] = field(default_factory=dict)


class FirestoreClient:
    """Client for Firestore CRUD operations.

    Automatically connects to emulator when FIRESTORE_EMULATOR_HOST is set.
    """

    def __init__(self, project_id: str) -> None:
        """Initialize Firestore client.

        Args:
            project_id: GCP project ID.
        """
        self._db = firestore.Client(project=project_id)

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Get a document by ID.

        Args:
            collection: Collection name.
            doc_id: Document ID.

        Returns:
            Document data or None if not found.
        """
        doc = self._db.collection(collection).document(doc_id).get()
        if doc.exists:
            return doc.to_dict()
        return None

    def get_many(
        self, collection: str, doc_ids: Iterable[str]
    ) -> dict[str, dict[str, Any]]:
        """Get several documents in one round trip.

        Args:
            collection: Collection name.
            doc_ids: Document IDs.

        Returns:
            Mapping of document ID to data for documents that exist.

        Raises:
            StoreUnavailableError: If Firestore cannot be reached.
        """
        col = self._db.collection(collection)
        refs = [col.document(doc_id) for doc_id in doc_ids]
        if not refs:
            return {}

        try:
            snapshots = list(self._db.get_all(refs))
        except _UNAVAILABLE_ERRORS as e:
            raise StoreUnavailableError(f"Firestore unavailable: {e}") from e

        return {snap.id: snap.to_dict() for snap in snapshots if snap.exists}

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or replace a document.

        Args:
            collection: Collection name.
            doc_id: Document ID.
            data: Document data.
        """
        self._db.collection(collection).document(doc_id).set(data)

    def bulk_set(
        self,
        collection: str,
        documents: dict[str, dict[str, Any]],
        merge: bool = False,
    ) -> BulkWriteOutcome:
        """Write many documents without atomicity.

        Rejected writes do not abort the others; they are reported in the
        outcome instead. Every document ends up either written or failed;
        anything else means the store was not reached.

        Args:
            collection: Collection name.
            documents: Mapping of document ID to data.
            merge: Merge into existing documents instead of replacing them.

        Returns:
            Written and failed document IDs.

        Raises:
            StoreUnavailableError: If Firestore cannot be reached.
        """
        outcome = BulkWriteOutcome()
        if not documents:
            return outcome

        def on_error(failure: Any, _writer: Any) -> bool:
            outcome.failed[failure.operation.reference.id] = str(failure.message)
            return False

        def on_result(reference: Any, _result: Any, _writer: Any) -> None:
            outcome.written.add(reference.id)

        col = self._db.collection(collection)
        # serial mode: commit errors raise from set()/close()
        writer = self._db.bulk_writer(options=BulkWriterOptions(mode=SendMode.serial))
        writer.on_write_error(on_error)
        writer.on_write_result(on_result)

        try:
            for doc_id, data in documents.items():
                writer.set(col.document(doc_id), data, merge=merge)
            writer.close()
        except _UNAVAILABLE_ERRORS as e:
            raise StoreUnavailableError(f"Firestore unavailable: {e}") from e

        unresolved = documents.keys() - outcome.written - outcome.failed.keys()
        if unresolved:
            raise StoreUnavailableError(
                f"Firestore unavailable: {len(unresolved)} write(s) unacknowledged"
            )

        return outcome

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Update specific fields in a document.

        Args:
            collection: Collection name.
            doc_id: Document ID.
            data: Fields to update.
        """
        self._db.collection(collection).document(doc_id).update(data)

    def transact(
        self,
        collection: str,
        doc_id: str,
        update_fn: Callable[[dict[str, Any] | None], dict[str, Any] | None],
    ) -> dict[str, Any] | None:
        """Read-modify-write a document inside a transaction.

        Args:
            collection: Collection name.
            doc_id: Document ID.
            update_fn: Receives the current data (None if missing) and returns
                the fields to update, or None to leave the document untouched.

        Returns:
            The fields written, or None if nothing was written.
        """
        ref = self._db.collection(collection).document(doc_id)
        transaction = self._db.transaction()

        @firestore.transactional
        def _run(txn: Any) -> dict[str, Any] | None:
            snapshot = ref.get(transaction=txn)
            current = snapshot.to_dict() if snapshot.exists else None
            changes = update_fn(current)
            if changes:
                txn.update(ref, changes)
            return changes

        return _run(transaction)

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document.

        Args:
            collection: Collection name.
            doc_id: Document ID.
        """
        self._db.collection(collection).document(doc_id).delete()

    def query(
        self, collection: str, filters: list[tuple[str, str, Any]]
    ) -> list[dict[str, Any]]:
        """Query documents with filters.

        Args:
            collection: Collection name.
            filters: List of (field, operator, value) tuples.

        Returns:
            List of matching documents.
        """
        query = self._db.collection(collection)
        for field_name, op, value in filters:
            query = query.where(filter=FieldFilter(field_name, op, value))

        return [doc.to_dict() for doc in query.stream()]

    def close(self) -> None:
        """Close the underlying gRPC channel."""
        self._db.close()
