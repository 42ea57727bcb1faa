"""Batch reconciler.

정규화된 레코드를 고정 크기 배치로 나누어 Firestore에 멱등하게 반영합니다.

- 카테고리: 배치 단위 사전 조회 후 생성/이름 변경/변경 없음 판별
- 스트림: 사전 조회 없이 배치 단위 bulk upsert
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import TypeVar

import structlog

from src.adapters.firestore_client import BulkWriteOutcome, StoreUnavailableError
from src.models.category import Category
from src.models.kind import ContentKind
from src.models.stream import StreamRecord
from src.models.sync_result import ReconcileStats
from src.repositories.category_repo import CategoryRepository
from src.repositories.stream_repo import StreamRepository

logger = structlog.get_logger(__name__)

R = TypeVar("R")

DEFAULT_BATCH_SIZE = 100


class BatchReconciler:
    """배치 단위 upsert 처리기.

    네트워크 호출 없이 저장소와만 상호작용합니다.
    """

    def __init__(
        self,
        category_repo: CategoryRepository,
        stream_repos: dict[ContentKind, StreamRepository],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        """BatchReconciler 초기화.

        Args:
            category_repo: 카테고리 리포지토리
            stream_repos: 종류별 스트림 리포지토리
            batch_size: 배치 크기
        """
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.category_repo = category_repo
        self.stream_repos = stream_repos
        self.batch_size = batch_size

    def batches(self, records: Sequence[R]) -> Iterator[list[R]]:
        """레코드를 batch_size 단위로 분할."""
        for start in range(0, len(records), self.batch_size):
            yield list(records[start : start + self.batch_size])

    def batch_count(self, records: Sequence[object]) -> int:
        """배치 개수."""
        return -(-len(records) // self.batch_size)

    def reconcile_categories(
        self,
        batch: list[Category],
        seen: dict[str, str] | None = None,
    ) -> ReconcileStats:
        """카테고리 배치 반영.

        (category_id, provider, category_type) 키로 기존 문서를 조회하여
        - 없음: 생성 (created)
        - 이름 다름: 이름만 갱신 (updated)
        - 동일: 쓰기 없음 (unchanged)

        Args:
            batch: 정규화된 카테고리 배치.
            seen: 같은 동기화 실행에서 이미 반영한 {키: 이름}.
                배치를 넘어 중복 레코드를 판별하기 위해 호출자가 유지합니다.

        Returns:
            배치 통계.

        Raises:
            StoreUnavailableError: 저장소에 연결할 수 없는 경우.
        """
        stats = ReconcileStats()
        if not batch:
            return stats
        if seen is None:
            seen = {}

        unseen_keys = list(dict.fromkeys(c.id for c in batch if c.id not in seen))
        stored = self.category_repo.get_existing_names(unseen_keys) if unseen_keys else {}

        creates: dict[str, Category] = {}
        renames: dict[str, str] = {}
        outcome_of: list[tuple[str, str]] = []  # (key, "created" | "updated")

        for category in batch:
            key = category.id
            if key in seen:
                current: str | None = seen[key]
            else:
                current = stored.get(key)

            if current is None:
                creates[key] = category
                outcome_of.append((key, "created"))
            elif current != category.category_name:
                if key in creates:
                    creates[key] = category
                else:
                    renames[key] = category.category_name
                outcome_of.append((key, "updated"))
            else:
                stats.unchanged += 1
            seen[key] = category.category_name

        outcome = self.category_repo.write_batch(list(creates.values()), renames)
        _ensure_acknowledged(outcome, creates.keys() | renames.keys())

        for key, kind in outcome_of:
            if key in outcome.failed:
                stats.invalid += 1
            elif kind == "created":
                stats.created += 1
            else:
                stats.updated += 1

        for key, message in outcome.failed.items():
            seen.pop(key, None)
            logger.warning("category_write_rejected", key=key, error=message)

        return stats

    def reconcile_streams(
        self, batch: list[StreamRecord], kind: ContentKind
    ) -> ReconcileStats:
        """스트림 배치 반영 (무조건 upsert).

        생성/갱신 구분 없이 성공한 레코드는 updated로 집계하고,
        저장소에서 거부된 레코드는 invalid로 집계합니다.

        Args:
            batch: 정규화된 스트림 배치.
            kind: 콘텐츠 종류.

        Returns:
            배치 통계.

        Raises:
            StoreUnavailableError: 저장소에 연결할 수 없는 경우.
        """
        stats = ReconcileStats()
        if not batch:
            return stats

        outcome = self.stream_repos[kind].bulk_upsert(batch)
        _ensure_acknowledged(outcome, {record.key for record in batch})

        for record in batch:
            if record.key in outcome.failed:
                stats.invalid += 1
            else:
                stats.updated += 1

        for key, message in outcome.failed.items():
            logger.warning("stream_write_rejected", kind=kind.value, key=key, error=message)

        return stats


def _ensure_acknowledged(outcome: BulkWriteOutcome, keys: Iterable[str]) -> None:
    """모든 키가 written 또는 failed로 확인되었는지 검사.

    Raises:
        StoreUnavailableError: 결과가 확인되지 않은 쓰기가 있는 경우.
    """
    missing = set(keys) - outcome.written - outcome.failed.keys()
    if missing:
        raise StoreUnavailableError(
            f"Firestore unavailable: {len(missing)} write(s) unacknowledged"
        )
