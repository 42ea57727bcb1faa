"""Category model for provider catalog classification.

provider별, 콘텐츠 종류별 카테고리를 관리합니다.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.models.kind import ContentKind


def generate_category_key(
    provider_id: str, kind: ContentKind, category_id: str
) -> str:
    """카테고리 멱등성 키 생성.

    (category_id, provider, category_type) 유일성 키를 문서 ID로 사용합니다.

    Format: {provider_id}_{kind.slug}_{category_id}
    """
    return f"{provider_id}_{kind.slug}_{category_id}"


class Category(BaseModel):
    """카테고리.

    Firestore Collection: categories
    """

    id: str = Field(..., description="문서 ID (generate_category_key)")
    category_id: str = Field(..., pattern=r"^\d{4,}$", description="4자리 숫자 문자열")
    category_name: str = Field("", description="카테고리 이름")
    parent_id: str | None = Field(
        None, pattern=r"^\d$", description="상위 카테고리 (동기화 시 항상 null)"
    )
    provider: str = Field(..., description="Provider ID")
    category_type: ContentKind = Field(..., description="Live TV / VOD / Series")

    created_at: datetime | None = Field(None, description="생성 시간")
    updated_at: datetime | None = Field(None, description="수정 시간")
