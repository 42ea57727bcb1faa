"""Repository for Provider entities.

Firestore providers 컬렉션에 대한 데이터 접근 레이어.
동기화 엔진은 provider를 읽기만 합니다.
"""

from src.adapters.firestore_client import FirestoreClient
from src.models.provider import Provider
from src.repositories.base import BaseRepository


class ProviderRepository(BaseRepository[Provider]):
    """Provider 엔티티 Repository.

    Firestore Collection: providers
    """

    collection_name = "providers"
    model_class = Provider

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """Initialize ProviderRepository.

        Args:
            firestore_client: Firestore 클라이언트 인스턴스.
        """
        super().__init__(firestore_client)

    def get_by_id(self, doc_id: str) -> Provider | None:
        """ID로 provider 조회.

        저장된 문서에 id 필드가 없으면 문서 ID를 사용합니다.
        """
        data = self._db.get(self.collection_name, doc_id)
        if data is None:
            return None
        return Provider(**{"id": doc_id, **data})

