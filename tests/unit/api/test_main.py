"""Tests for FastAPI main application."""

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from src.adapters.tasks_client import TasksClient
from src.config.settings import Settings
from src.models.kind import ContentKind
from src.services.sync_worker import SyncWorker
from tests.utils import FakeFirestore


class TestHealthEndpoint:
    """Test /health endpoint."""

    def test_health_returns_healthy(self) -> None:
        """GET /health should return healthy status."""
        from src.api.main import app

        client = TestClient(app)
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestBuilders:
    """Tests for application wiring helpers."""

    def test_build_tasks_client_uses_retry_settings(self) -> None:
        """재시도 정책은 설정값으로 구성."""
        from src.api.main import build_tasks_client

        settings = Settings(
            GCP_PROJECT_ID="test-project",
            TASKS_MODE="direct",
            SYNC_MAX_ATTEMPTS=5,
            SYNC_BACKOFF_BASE_SECONDS=2.0,
        )

        tasks = build_tasks_client(settings)
        try:
            assert tasks.retry_policy.max_attempts == 5
            assert tasks.retry_policy.base_delay_seconds == 2.0
        finally:
            tasks.shutdown(wait=True)

    def test_build_sync_worker(self) -> None:
        """설정의 제외 목록/잠금 설정이 워커에 전달."""
        from src.api.main import build_sync_worker

        settings = Settings(
            GCP_PROJECT_ID="test-project",
            EXCLUDE_VOD_CATEGORIES=["35", "36"],
            SYNC_LOCK_DURATION_SECONDS=120,
            JOBS_KEEP_FAILED=7,
        )
        tasks = MagicMock(spec=TasksClient)

        worker = build_sync_worker(settings, FakeFirestore(), MagicMock(), tasks)

        assert isinstance(worker, SyncWorker)
        assert worker.lock_duration.total_seconds() == 120
        assert worker.keep_failed == 7
        vod_filter = worker.orchestrator.filters[ContentKind.VOD]
        assert vod_filter.is_excluded({"category_id": "036"})
        tasks.register_handler.assert_called_once_with("sync", worker.handle_task)


class TestLifespan:
    """Tests for application lifespan."""

    def test_startup_and_shutdown(self) -> None:
        """시작 시 클라이언트 생성, 종료 시 정리."""
        from src.api.main import app

        settings = Settings(GCP_PROJECT_ID="test-project", LOG_JSON=False)
        with (
            patch("src.api.main.Settings", return_value=settings),
            patch("src.api.main.configure_logging") as mock_logging,
            patch("src.api.main.FirestoreClient") as mock_firestore,
            patch("src.api.main.XtreamClient") as mock_xtream,
            patch("src.api.main.build_tasks_client") as mock_tasks,
        ):
            with TestClient(app) as client:
                assert client.get("/health").status_code == 200
                assert isinstance(app.state.worker, SyncWorker)

            mock_logging.assert_called_once_with(json_logs=False, level="INFO")
            mock_xtream.assert_called_once_with(
                credentials_timeout=15.0, catalog_timeout=20.0
            )
            mock_tasks.return_value.apply_queue_config.assert_called_once()
            mock_tasks.return_value.shutdown.assert_called_once_with(wait=True)
            mock_xtream.return_value.close.assert_called_once()
            mock_firestore.return_value.close.assert_called_once()
