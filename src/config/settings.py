"""Application settings using Pydantic Settings."""

from typing import TYPE_CHECKING

from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from src.models.kind import ContentKind


class Settings(BaseSettings):
    """Application configuration from environment variables.

    All required settings must be provided via environment variables or .env file.
    Optional settings have default values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Google Cloud Platform
    # -------------------------------------------------------------------------
    GCP_PROJECT_ID: str

    # Firestore Emulator (local development)
    FIRESTORE_EMULATOR_HOST: str | None = None

    # -------------------------------------------------------------------------
    # Cloud Tasks
    # -------------------------------------------------------------------------
    TASKS_MODE: str = "direct"  # "direct" or "cloud_tasks"
    TASKS_TARGET_URL: str | None = None
    TASKS_SERVICE_ACCOUNT_EMAIL: str | None = None
    TASKS_LOCATION: str = "asia-northeast3"
    TASKS_QUEUE: str = "catalog-sync"

    TASKS_CONCURRENCY: int = 1
    """워커 프로세스당 동시 실행 작업 수 (1~3 권장)"""

    # -------------------------------------------------------------------------
    # Sync jobs
    # -------------------------------------------------------------------------
    SYNC_MAX_ATTEMPTS: int = 3
    SYNC_BACKOFF_BASE_SECONDS: float = 5.0  # 재시도 간격 (지수 증가)
    SYNC_LOCK_DURATION_SECONDS: int = 600  # 작업 잠금 유지 시간
    SYNC_LOCK_RENEW_SECONDS: int = 15  # 잠금 갱신 주기
    SYNC_MAX_STALLED_COUNT: int = 1
    SYNC_BATCH_SIZE: int = 100

    JOBS_KEEP_COMPLETED: int = 100
    JOBS_KEEP_FAILED: int = 200

    # -------------------------------------------------------------------------
    # Provider API (Xtream-Codes)
    # -------------------------------------------------------------------------
    CREDENTIALS_TIMEOUT_SECONDS: float = 15.0
    CATALOG_TIMEOUT_SECONDS: float = 20.0

    # -------------------------------------------------------------------------
    # Category exclusion
    # -------------------------------------------------------------------------
    EXCLUDE_LIVE_CATEGORIES: list[str] = ["81"]
    EXCLUDE_VOD_CATEGORIES: list[str] = ["35"]
    EXCLUDE_SERIES_CATEGORIES: list[str] = ["169"]

    EXCLUDE_ON_CATEGORY_SYNC: bool = False
    """카테고리 동기화에도 제외 목록 적용 여부"""

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"

    @property
    def is_local(self) -> bool:
        """Check if running in local development mode."""
        return self.FIRESTORE_EMULATOR_HOST is not None

    def exclusions_for(self, kind: "ContentKind") -> list[str]:
        """Get the category denylist for a content kind."""
        from src.models.kind import ContentKind

        return {
            ContentKind.LIVE: self.EXCLUDE_LIVE_CATEGORIES,
            ContentKind.VOD: self.EXCLUDE_VOD_CATEGORIES,
            ContentKind.SERIES: self.EXCLUDE_SERIES_CATEGORIES,
        }[kind]


# Singleton instance (lazy initialization)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings
