"""Repositories for stream entities (live / VOD / series).

Firestore *_streams 컬렉션에 대한 데이터 접근 레이어.
"""

from src.adapters.firestore_client import BulkWriteOutcome, FirestoreClient
from src.models.kind import ContentKind
from src.models.stream import LiveStream, SeriesStream, StreamRecord, VodStream
from src.repositories.base import BaseRepository


class StreamRepository(BaseRepository[StreamRecord]):
    """스트림 Repository 기본 클래스.

    문서 ID = generate_stream_key(provider, stream_id | series_id)
    """

    kind: ContentKind

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """Initialize StreamRepository.

        Args:
            firestore_client: Firestore 클라이언트 인스턴스.
        """
        super().__init__(firestore_client)

    def bulk_upsert(self, records: list[StreamRecord]) -> BulkWriteOutcome:
        """스트림 레코드를 무조건 upsert (사전 조회 없음).

        merge 쓰기이므로 레코드에 없는 필드(feature 등 큐레이션 필드)는
        기존 값이 유지됩니다. 같은 키가 중복되면 마지막 레코드가 반영됩니다.

        Args:
            records: 정규화된 스트림 레코드.

        Returns:
            성공/실패 문서 ID.
        """
        documents = {
            record.key: self._serialize_for_firestore(record.to_document())
            for record in records
        }
        return self._db.bulk_set(self.collection_name, documents, merge=True)


class LiveStreamRepository(StreamRepository):
    """LiveStream Repository.

    Firestore Collection: live_streams
    """

    collection_name = "live_streams"
    model_class = LiveStream
    kind = ContentKind.LIVE


class VodStreamRepository(StreamRepository):
    """VodStream Repository.

    Firestore Collection: vod_streams
    """

    collection_name = "vod_streams"
    model_class = VodStream
    kind = ContentKind.VOD


class SeriesStreamRepository(StreamRepository):
    """SeriesStream Repository.

    Firestore Collection: series_streams
    """

    collection_name = "series_streams"
    model_class = SeriesStream
    kind = ContentKind.SERIES


def build_stream_repositories(
    firestore_client: FirestoreClient,
) -> dict[ContentKind, StreamRepository]:
    """종류별 스트림 Repository 생성."""
    return {
        ContentKind.LIVE: LiveStreamRepository(firestore_client),
        ContentKind.VOD: VodStreamRepository(firestore_client),
        ContentKind.SERIES: SeriesStreamRepository(firestore_client),
    }
