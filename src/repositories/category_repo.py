"""Repository for Category entities.

Firestore categories 컬렉션에 대한 데이터 접근 레이어.
"""

from datetime import UTC, datetime
from typing import Any

from src.adapters.firestore_client import BulkWriteOutcome, FirestoreClient
from src.models.category import Category
from src.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Category 엔티티 Repository.

    Firestore Collection: categories
    문서 ID = generate_category_key(provider, category_type, category_id)
    """

    collection_name = "categories"
    model_class = Category

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """Initialize CategoryRepository.

        Args:
            firestore_client: Firestore 클라이언트 인스턴스.
        """
        super().__init__(firestore_client)

    def get_existing_names(self, keys: list[str]) -> dict[str, str]:
        """기존 카테고리 이름 조회 (unchanged 판별용).

        Args:
            keys: 카테고리 문서 ID 목록.

        Returns:
            존재하는 카테고리의 {문서 ID: category_name} dict.
        """
        found = self._db.get_many(self.collection_name, keys)
        return {key: data.get("category_name", "") for key, data in found.items()}

    def write_batch(
        self,
        creates: list[Category],
        renames: dict[str, str],
    ) -> BulkWriteOutcome:
        """카테고리 생성/이름 변경을 한 번의 bulk write로 반영.

        개별 문서 실패는 나머지 쓰기를 중단하지 않습니다.

        Args:
            creates: 새로 생성할 카테고리.
            renames: {문서 ID: 새 category_name} (기존 문서 부분 갱신).

        Returns:
            성공/실패 문서 ID.
        """
        now = datetime.now(UTC)
        documents: dict[str, dict[str, Any]] = {}

        for category in creates:
            data = self._model_to_dict(category)
            data["created_at"] = now
            data["updated_at"] = now
            documents[category.id] = data

        for key, name in renames.items():
            documents[key] = {"category_name": name, "updated_at": now}

        return self._db.bulk_set(self.collection_name, documents, merge=True)
