"""Tests for Settings configuration."""

import pytest
from pydantic import ValidationError

from src.models.kind import ContentKind


class TestSettings:
    """Test Settings class."""

    def test_settings_loads_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings should load values from environment variables."""
        monkeypatch.setenv("GCP_PROJECT_ID", "test-project")
        monkeypatch.setenv("SYNC_BATCH_SIZE", "50")
        monkeypatch.setenv("TASKS_CONCURRENCY", "3")

        from src.config.settings import Settings

        settings = Settings()

        assert settings.GCP_PROJECT_ID == "test-project"
        assert settings.SYNC_BATCH_SIZE == 50
        assert settings.TASKS_CONCURRENCY == 3

    def test_settings_missing_required_raises_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Settings should raise ValidationError when required vars are missing."""
        monkeypatch.delenv("GCP_PROJECT_ID", raising=False)

        from src.config.settings import Settings

        with pytest.raises(ValidationError):
            # _env_file=None으로 .env 파일 로딩 비활성화
            Settings(_env_file=None)

    def test_settings_is_local_property(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """is_local should return True when FIRESTORE_EMULATOR_HOST is set."""
        monkeypatch.setenv("GCP_PROJECT_ID", "test-project")
        monkeypatch.setenv("FIRESTORE_EMULATOR_HOST", "localhost:8086")

        from src.config.settings import Settings

        settings = Settings()
        assert settings.is_local is True

    def test_settings_is_local_false_when_no_emulator(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """is_local should return False when FIRESTORE_EMULATOR_HOST is not set."""
        monkeypatch.setenv("GCP_PROJECT_ID", "test-project")
        monkeypatch.delenv("FIRESTORE_EMULATOR_HOST", raising=False)

        from src.config.settings import Settings

        settings = Settings(_env_file=None)
        assert settings.is_local is False

    def test_settings_sync_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Job and retry settings should have the recommended defaults."""
        monkeypatch.setenv("GCP_PROJECT_ID", "test-project")
        monkeypatch.delenv("TASKS_MODE", raising=False)

        from src.config.settings import Settings

        settings = Settings(_env_file=None)

        assert settings.TASKS_MODE == "direct"
        assert settings.SYNC_MAX_ATTEMPTS == 3
        assert settings.SYNC_BACKOFF_BASE_SECONDS == 5.0
        assert settings.SYNC_LOCK_DURATION_SECONDS >= 600
        assert settings.SYNC_BATCH_SIZE == 100
        assert settings.CREDENTIALS_TIMEOUT_SECONDS == 15.0
        assert settings.CATALOG_TIMEOUT_SECONDS == 20.0
        assert settings.EXCLUDE_ON_CATEGORY_SYNC is False

    def test_exclusions_for_kind(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """exclusions_for should map each kind to its denylist."""
        monkeypatch.setenv("GCP_PROJECT_ID", "test-project")
        monkeypatch.setenv("EXCLUDE_VOD_CATEGORIES", '["35", "0040"]')

        from src.config.settings import Settings

        settings = Settings(_env_file=None)

        assert settings.exclusions_for(ContentKind.LIVE) == ["81"]
        assert settings.exclusions_for(ContentKind.VOD) == ["35", "0040"]
        assert settings.exclusions_for(ContentKind.SERIES) == ["169"]
