"""Record normalizer.

provider 원본 레코드를 종류별 표준 스키마로 변환합니다.
식별자 검증에 실패한 레코드는 예외가 아닌 InvalidRecord로 반환되어 집계됩니다.
"""

import re
from collections.abc import Collection
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from src.models.category import Category, generate_category_key
from src.models.kind import ContentKind
from src.models.stream import (
    CURATION_FIELDS,
    STREAM_MODELS,
    StreamRecord,
    StreamStatus,
)

_NUMERIC = re.compile(r"^\d+$")

# 스트림 문서에 절대 저장하지 않는 provider 접속 정보
CREDENTIAL_FIELDS = frozenset({"username", "password", "dns"})


@dataclass(frozen=True)
class InvalidRecord:
    """정규화 실패 레코드."""

    reason: str
    raw: Any


def normalize_category(
    raw: Any, provider_id: str, kind: ContentKind
) -> Category | InvalidRecord:
    """카테고리 원본을 표준 스키마로 변환.

    - category_id: 숫자 문자열만 허용, 4자리 zero-padding ("81" -> "0081")
    - category_name: 공백 제거 (없으면 "")
    - parent_id: 항상 None (계층은 관리자 작업으로 구성)
    """
    if not isinstance(raw, dict):
        return InvalidRecord("record is not an object", raw)

    category_id = raw.get("category_id")
    if category_id is None or isinstance(category_id, bool):
        return InvalidRecord("missing category_id", raw)

    category_id = str(category_id).strip()
    if not _NUMERIC.match(category_id):
        return InvalidRecord(f"non-numeric category_id: {category_id!r}", raw)

    padded = category_id.zfill(4)
    return Category(
        id=generate_category_key(provider_id, kind, padded),
        category_id=padded,
        category_name=str(raw.get("category_name") or "").strip(),
        parent_id=None,
        provider=provider_id,
        category_type=kind,
    )


def _coerce_record_id(value: Any) -> int | None:
    """숫자 식별자 변환 (int 또는 숫자 문자열만 허용)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and _NUMERIC.match(value.strip()):
        return int(value.strip())
    return None


def normalize_stream(
    raw: Any,
    provider_id: str,
    kind: ContentKind,
    secrets: Collection[str] = (),
    synced_at: datetime | None = None,
) -> StreamRecord | InvalidRecord:
    """스트림 원본을 표준 스키마로 변환.

    식별자 외의 provider 필드는 그대로 보존합니다. 단, 접속 정보 필드와
    해석된 자격증명 값과 같은 값은 저장하지 않고, 큐레이션 필드는 무시합니다.

    Args:
        raw: provider 원본 레코드.
        provider_id: 동기화 중인 provider ID.
        kind: 콘텐츠 종류.
        secrets: 저장하면 안 되는 값 (username/password).
        synced_at: 동기화 시간.

    Returns:
        StreamRecord 또는 InvalidRecord.
    """
    if not isinstance(raw, dict):
        return InvalidRecord("record is not an object", raw)

    id_field = kind.id_field
    record_id = _coerce_record_id(raw.get(id_field))
    if record_id is None:
        return InvalidRecord(f"non-numeric {id_field}: {raw.get(id_field)!r}", raw)

    secret_values = {s for s in secrets if s}
    metadata = {
        key: value
        for key, value in raw.items()
        if key not in CREDENTIAL_FIELDS
        and key not in CURATION_FIELDS
        and not (isinstance(value, str) and value in secret_values)
    }
    metadata.update(
        {
            id_field: record_id,
            "provider": provider_id,
            "status": StreamStatus.ACTIVE,
            "synced_at": synced_at or datetime.now(UTC),
        }
    )

    try:
        return STREAM_MODELS[kind](**metadata)
    except ValidationError as e:
        return InvalidRecord(f"schema validation failed: {e.error_count()} error(s)", raw)
