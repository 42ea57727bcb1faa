"""Category exclusion filter.

종류별 제외 목록(denylist)에 포함된 카테고리의 레코드를 제거합니다.
"""

from collections.abc import Iterable
from typing import Any


def normalize_category_id(category_id: Any) -> str:
    """카테고리 ID 정규화 (앞자리 0 제거).

    "081" -> "81", None/"" -> "" (어떤 제외 항목과도 매칭되지 않음)
    """
    if category_id is None or category_id == "":
        return ""
    return str(category_id).strip().lstrip("0")


class CategoryExclusionFilter:
    """카테고리 제외 필터.

    category_id 또는 category_ids 중 하나라도 제외 목록에 있으면 레코드를 제거합니다.
    """

    def __init__(self, denylist: Iterable[Any]) -> None:
        self._denylist = frozenset(
            normalized for normalized in map(normalize_category_id, denylist) if normalized
        )

    def is_excluded(self, record: dict[str, Any]) -> bool:
        """레코드 제외 여부."""
        if not self._denylist:
            return False

        if normalize_category_id(record.get("category_id")) in self._denylist:
            return True

        category_ids = record.get("category_ids")
        if isinstance(category_ids, list):
            return any(
                normalize_category_id(cid) in self._denylist for cid in category_ids
            )
        return False

    def filter(self, records: list[Any]) -> list[Any]:
        """제외 대상이 아닌 레코드만 반환.

        dict가 아닌 레코드는 정규화 단계에서 invalid로 집계되도록 그대로 통과시킵니다.
        """
        return [
            record
            for record in records
            if not (isinstance(record, dict) and self.is_excluded(record))
        ]
