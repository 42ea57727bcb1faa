"""Provider model for upstream IPTV sources.

Xtream-Codes 방식의 업스트림 provider 정보를 관리합니다.
동기화 엔진에서는 읽기 전용입니다.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ProviderStatus(str, Enum):
    """Provider 상태."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    SUSPENDED = "Suspended"


class Provider(BaseModel):
    """업스트림 IPTV provider.

    Firestore Collection: providers
    """

    id: str = Field(..., description="고유 ID")
    owner: str = Field(..., description="소유자 (super-admin 또는 사용자 ID)")
    name: str = Field(..., description="Provider 이름")

    api_endpoint: str = Field(..., alias="apiEndpoint", description="자격증명 발급 URL")
    dns: str | None = Field(
        None, description="콘텐츠 API 기본 URL (없으면 자격증명 응답의 dns 사용)"
    )

    status: ProviderStatus = Field(ProviderStatus.ACTIVE, description="상태")
    max_concurrent_users: int = Field(1, alias="maxConcurrentUsers", ge=1)
    expiry_hours: int = Field(1, alias="expiryHours", ge=1)

    created_at: datetime | None = Field(None, description="생성 시간")
    updated_at: datetime | None = Field(None, description="수정 시간")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "id": "prv_001",
                "owner": "super-admin",
                "name": "Main Provider",
                "apiEndpoint": "https://auth.example.com/issue",
                "dns": "https://d.example",
                "status": "Active",
                "maxConcurrentUsers": 5,
                "expiryHours": 24,
            }
        },
    }

    @property
    def is_active(self) -> bool:
        """동기화 가능 여부."""
        return self.status == ProviderStatus.ACTIVE
