"""Stream models for live channels, VOD titles and series.

provider가 제공하는 메타데이터 필드는 그대로 보존하고
(extra="allow"), 식별자/provider/status만 타입을 강제합니다.
"""

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.kind import ContentKind


class StreamStatus(str, Enum):
    """스트림 상태."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    HIDDEN = "HIDDEN"  # Live / VOD 전용


# 관리자 큐레이션 필드 (동기화로 덮어쓰지 않음)
CURATION_FIELDS = frozenset({"feature", "favorite"})


def generate_stream_key(provider_id: str, stream_id: int) -> str:
    """스트림 멱등성 키 생성.

    Format: {provider_id}_{stream_id}
    """
    return f"{provider_id}_{stream_id}"


class StreamRecord(BaseModel):
    """스트림 레코드 공통 스키마.

    선언되지 않은 provider 필드(name, stream_icon, plot 등)는
    extra 필드로 보존됩니다.
    """

    model_config = ConfigDict(extra="allow")

    kind: ClassVar[ContentKind]

    provider: str = Field(..., description="Provider ID")
    category_id: str | None = Field(None, description="대표 카테고리 ID")
    category_ids: list[Any] | None = Field(None, description="대체 카테고리 ID 목록")
    status: StreamStatus = Field(StreamStatus.ACTIVE, description="상태")
    synced_at: datetime | None = Field(None, description="마지막 동기화 시간")

    @field_validator("category_id", mode="before")
    @classmethod
    def _stringify_category_id(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return str(value)

    @property
    def record_id(self) -> int:
        """종류별 숫자 식별자."""
        return getattr(self, self.kind.id_field)

    @property
    def key(self) -> str:
        """문서 ID."""
        return generate_stream_key(self.provider, self.record_id)

    def to_document(self) -> dict[str, Any]:
        """Firestore 저장용 dict (큐레이션 필드 제외)."""
        data = self.model_dump(mode="python")
        for field in CURATION_FIELDS:
            data.pop(field, None)
        return data


class LiveStream(StreamRecord):
    """라이브 채널.

    Firestore Collection: live_streams
    """

    kind: ClassVar[ContentKind] = ContentKind.LIVE

    stream_id: int = Field(..., ge=0, description="Provider 스트림 ID")


class VodStream(StreamRecord):
    """VOD 타이틀.

    Firestore Collection: vod_streams
    """

    kind: ClassVar[ContentKind] = ContentKind.VOD

    stream_id: int = Field(..., ge=0, description="Provider 스트림 ID")


class SeriesStream(StreamRecord):
    """시리즈.

    Firestore Collection: series_streams
    """

    kind: ClassVar[ContentKind] = ContentKind.SERIES

    series_id: int = Field(..., ge=0, description="Provider 시리즈 ID")

    @field_validator("status")
    @classmethod
    def _no_hidden_series(cls, value: StreamStatus) -> StreamStatus:
        if value == StreamStatus.HIDDEN:
            raise ValueError("HIDDEN status is not supported for series")
        return value


STREAM_MODELS: dict[ContentKind, type[StreamRecord]] = {
    ContentKind.LIVE: LiveStream,
    ContentKind.VOD: VodStream,
    ContentKind.SERIES: SeriesStream,
}
