"""Test utilities shared across test modules."""

import copy
import os
import socket
import threading
from collections.abc import Callable, Iterable
from typing import Any

from google.api_core import exceptions as gcp_exceptions

from src.adapters.firestore_client import BulkWriteOutcome, StoreUnavailableError


def is_emulator_available() -> bool:
    """Firestore 에뮬레이터 사용 가능 여부 확인.

    환경변수 FIRESTORE_EMULATOR_HOST에서 호스트/포트를 읽어
    연결 가능 여부를 확인합니다.

    Returns:
        에뮬레이터 연결 가능 여부.
    """
    host = os.environ.get("FIRESTORE_EMULATOR_HOST", "localhost:8086")
    host_parts = host.split(":")
    hostname = host_parts[0]
    port = int(host_parts[1]) if len(host_parts) > 1 else 8086

    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(1)
            result = sock.connect_ex((hostname, port))
            return result == 0
    except OSError:
        return False


class FakeFirestore:
    """FirestoreClient와 같은 인터페이스의 인메모리 저장소.

    - reject: bulk_set에서 거부할 문서 ID (부분 실패 재현)
    - unavailable: True면 get_many/bulk_set이 StoreUnavailableError 발생
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.reject: set[str] = set()
        self.unavailable = False
        self.bulk_calls: list[tuple[str, int]] = []
        self._lock = threading.Lock()

    def docs(self, collection: str) -> dict[str, dict[str, Any]]:
        """컬렉션의 전체 문서 (테스트 검증용)."""
        return self.collections.get(collection, {})

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            data = self.docs(collection).get(doc_id)
            return copy.deepcopy(data) if data is not None else None

    def get_many(
        self, collection: str, doc_ids: Iterable[str]
    ) -> dict[str, dict[str, Any]]:
        if self.unavailable:
            raise StoreUnavailableError("Firestore unavailable: fake")
        with self._lock:
            docs = self.docs(collection)
            return {
                doc_id: copy.deepcopy(docs[doc_id])
                for doc_id in doc_ids
                if doc_id in docs
            }

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            self.collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    def bulk_set(
        self,
        collection: str,
        documents: dict[str, dict[str, Any]],
        merge: bool = False,
    ) -> BulkWriteOutcome:
        if self.unavailable:
            raise StoreUnavailableError("Firestore unavailable: fake")
        outcome = BulkWriteOutcome()
        if not documents:
            return outcome
        with self._lock:
            self.bulk_calls.append((collection, len(documents)))
            target = self.collections.setdefault(collection, {})
            for doc_id, data in documents.items():
                if doc_id in self.reject:
                    outcome.failed[doc_id] = "rejected"
                    continue
                if merge and doc_id in target:
                    target[doc_id].update(copy.deepcopy(data))
                else:
                    target[doc_id] = copy.deepcopy(data)
                outcome.written.add(doc_id)
        return outcome

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            docs = self.docs(collection)
            if doc_id not in docs:
                raise gcp_exceptions.NotFound(f"No document to update: {doc_id}")
            docs[doc_id].update(copy.deepcopy(data))

    def transact(
        self,
        collection: str,
        doc_id: str,
        update_fn: Callable[[dict[str, Any] | None], dict[str, Any] | None],
    ) -> dict[str, Any] | None:
        with self._lock:
            docs = self.docs(collection)
            current = copy.deepcopy(docs.get(doc_id))
            changes = update_fn(current)
            if changes:
                docs[doc_id].update(copy.deepcopy(changes))
            return changes

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self.docs(collection).pop(doc_id, None)

    def query(
        self, collection: str, filters: list[tuple[str, str, Any]]
    ) -> list[dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(data)
                for data in self.docs(collection).values()
                if all(op == "==" and data.get(f) == v for f, op, v in filters)
            ]

    def close(self) -> None:
        pass
