"""Content kinds and sync job kinds.

콘텐츠 종류(Live TV / VOD / Series)별 provider action, 식별자 필드, 컬렉션을 정의합니다.
"""

from enum import Enum


class ContentKind(str, Enum):
    """콘텐츠 종류.

    값은 Category.category_type 으로 그대로 저장됩니다.
    """

    LIVE = "Live TV"
    VOD = "VOD"
    SERIES = "Series"

    @property
    def slug(self) -> str:
        """문서 ID에 사용하는 짧은 이름."""
        return _SLUGS[self]

    @property
    def category_action(self) -> str:
        """카테고리 목록 provider action."""
        return _CATEGORY_ACTIONS[self]

    @property
    def stream_action(self) -> str:
        """스트림 목록 provider action."""
        return _STREAM_ACTIONS[self]

    @property
    def id_field(self) -> str:
        """스트림 레코드의 숫자 식별자 필드."""
        return "series_id" if self is ContentKind.SERIES else "stream_id"


_SLUGS = {
    ContentKind.LIVE: "live",
    ContentKind.VOD: "vod",
    ContentKind.SERIES: "series",
}

_CATEGORY_ACTIONS = {
    ContentKind.LIVE: "get_live_categories",
    ContentKind.VOD: "get_vod_categories",
    ContentKind.SERIES: "get_series_categories",
}

_STREAM_ACTIONS = {
    ContentKind.LIVE: "get_live_streams",
    ContentKind.VOD: "get_vod_streams",
    ContentKind.SERIES: "get_series",
}

CATALOG_ACTIONS = frozenset(_CATEGORY_ACTIONS.values()) | frozenset(
    _STREAM_ACTIONS.values()
)


class SyncJobKind(str, Enum):
    """동기화 작업 종류."""

    CATEGORY = "sync-category"
    LIVE = "sync-live"
    VOD = "sync-vod"
    SERIES = "sync-series"

    @property
    def content_kind(self) -> ContentKind | None:
        """스트림 동기화 작업의 콘텐츠 종류 (카테고리 동기화는 None)."""
        return {
            SyncJobKind.LIVE: ContentKind.LIVE,
            SyncJobKind.VOD: ContentKind.VOD,
            SyncJobKind.SERIES: ContentKind.SERIES,
        }.get(self)
