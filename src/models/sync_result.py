"""Sync result models.

동기화 통계(created/updated/unchanged/invalid)와 작업 결과 payload를 정의합니다.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.kind import ContentKind


@dataclass
class ReconcileStats:
    """배치 반영 결과."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    invalid: int = 0

    def __add__(self, other: "ReconcileStats") -> "ReconcileStats":
        return ReconcileStats(
            created=self.created + other.created,
            updated=self.updated + other.updated,
            unchanged=self.unchanged + other.unchanged,
            invalid=self.invalid + other.invalid,
        )

    @property
    def written(self) -> int:
        """저장에 성공한 레코드 수."""
        return self.created + self.updated


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProviderRef(_CamelModel):
    """결과에 포함되는 provider 요약."""

    id: str
    name: str


class KindStats(_CamelModel):
    """콘텐츠 종류별 통계."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    invalid: int = 0
    excluded: int = 0
    total: int = 0
    error: str | None = None

    @property
    def failed(self) -> bool:
        """해당 종류의 동기화 실패 여부."""
        return self.error is not None

    def add(self, stats: ReconcileStats) -> None:
        """배치 결과 누적."""
        self.created += stats.created
        self.updated += stats.updated
        self.unchanged += stats.unchanged
        self.invalid += stats.invalid


class CategorySyncSummary(_CamelModel):
    """카테고리 동기화 합계."""

    total_categories: int = 0
    total_created: int = 0
    total_updated: int = 0
    total_unchanged: int = 0
    total_invalid: int = 0
    total_excluded: int = 0
    kinds_succeeded: int = 0
    kinds_failed: int = 0

    @classmethod
    def from_kinds(cls, kinds: dict[ContentKind, KindStats]) -> "CategorySyncSummary":
        """종류별 통계를 합산."""
        stats = list(kinds.values())
        return cls(
            total_categories=sum(s.total for s in stats),
            total_created=sum(s.created for s in stats),
            total_updated=sum(s.updated for s in stats),
            total_unchanged=sum(s.unchanged for s in stats),
            total_invalid=sum(s.invalid for s in stats),
            total_excluded=sum(s.excluded for s in stats),
            kinds_succeeded=sum(1 for s in stats if not s.failed),
            kinds_failed=sum(1 for s in stats if s.failed),
        )


def format_duration(seconds: float) -> str:
    """소요 시간 문자열 ("12.34s")."""
    return f"{seconds:.2f}s"


class CategorySyncResult(_CamelModel):
    """카테고리 동기화 결과 (Live TV / VOD / Series)."""

    kinds: dict[ContentKind, KindStats]
    summary: CategorySyncSummary
    sync_duration: str
    provider: ProviderRef
    completed_at: datetime

    @property
    def success(self) -> bool:
        """한 종류 이상 성공했는지 여부."""
        return self.summary.kinds_succeeded > 0

    @property
    def failed_kinds(self) -> list[ContentKind]:
        """실패한 종류 목록."""
        return [kind for kind, stats in self.kinds.items() if stats.failed]

    def to_payload(self) -> dict[str, Any]:
        """작업 결과로 저장할 payload.

        {"Live TV": {...}, "VOD": {...}, "Series": {...}, "summary": {...}, ...}
        """
        payload: dict[str, Any] = {
            kind.value: stats.model_dump(by_alias=True, exclude_none=True)
            for kind, stats in self.kinds.items()
        }
        payload["summary"] = self.summary.model_dump(by_alias=True)
        payload["syncDuration"] = self.sync_duration
        payload["provider"] = self.provider.model_dump(by_alias=True)
        payload["success"] = self.success
        payload["failedKinds"] = [kind.value for kind in self.failed_kinds]
        payload["completedAt"] = self.completed_at.isoformat()
        return payload


class StreamSyncResult(_CamelModel):
    """단일 종류 스트림 동기화 결과."""

    kind: ContentKind
    success: bool = True
    total: int = Field(0, description="수행된 upsert 수")
    fetched: int = 0
    excluded: int = 0
    invalid: int = 0
    sync_duration: str = "0.00s"
    provider: ProviderRef

    def to_payload(self) -> dict[str, Any]:
        """작업 결과로 저장할 payload."""
        return self.model_dump(by_alias=True, mode="json")
