"""Tests for SyncJob and sync result models."""

from datetime import UTC, datetime

from src.models.kind import ContentKind, SyncJobKind
from src.models.sync_job import JobState, SyncJob, generate_job_id
from src.models.sync_result import (
    CategorySyncResult,
    CategorySyncSummary,
    KindStats,
    ProviderRef,
    ReconcileStats,
    StreamSyncResult,
    format_duration,
)


def make_job(**overrides: object) -> SyncJob:
    now = datetime.now(UTC)
    data: dict[str, object] = {
        "kind": SyncJobKind.CATEGORY,
        "provider_id": "P",
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return SyncJob(**data)  # type: ignore[arg-type]


class TestSyncJob:
    """Tests for SyncJob model."""

    def test_generate_job_id(self) -> None:
        """job_ 접두사 + 12자리 hex."""
        job_id = generate_job_id()

        assert job_id.startswith("job_")
        assert len(job_id) == 16

    def test_defaults(self) -> None:
        """새 작업은 waiting 상태."""
        job = make_job()

        assert job.state == JobState.WAITING
        assert job.progress == 0
        assert job.attempts_made == 0
        assert job.max_attempts == 3

    def test_attempts_exhausted(self) -> None:
        """시도 횟수가 최대치에 도달하면 소진."""
        assert make_job(attempts_made=2).attempts_exhausted is False
        assert make_job(attempts_made=3).attempts_exhausted is True

    def test_terminal_states(self) -> None:
        """completed / failed만 최종 상태."""
        assert JobState.COMPLETED.is_terminal
        assert JobState.FAILED.is_terminal
        assert not JobState.ACTIVE.is_terminal
        assert not JobState.WAITING.is_terminal

    def test_status_includes_result_when_completed(self) -> None:
        """완료된 작업은 result 포함."""
        job = make_job(state=JobState.COMPLETED, progress=100, result={"success": True})

        status = job.to_status()

        assert status["state"] == "completed"
        assert status["result"] == {"success": True}
        assert "error" not in status

    def test_status_includes_error_when_failed(self) -> None:
        """실패한 작업은 error 포함."""
        job = make_job(state=JobState.FAILED, error="Provider is Suspended.")

        status = job.to_status()

        assert status["error"] == "Provider is Suspended."
        assert "result" not in status


class TestSyncResult:
    """Tests for sync result models."""

    def test_reconcile_stats_add(self) -> None:
        """배치 통계 합산."""
        total = ReconcileStats(created=1, invalid=1) + ReconcileStats(
            updated=2, unchanged=3
        )

        assert total == ReconcileStats(created=1, updated=2, unchanged=3, invalid=1)
        assert total.written == 3

    def test_format_duration(self) -> None:
        """소요 시간은 초 단위 문자열."""
        assert format_duration(1.234) == "1.23s"

    def test_category_payload_shape(self) -> None:
        """카테고리 결과 payload 형태."""
        kinds = {
            ContentKind.LIVE: KindStats(created=2, total=2),
            ContentKind.VOD: KindStats(error="get_vod_categories timed out"),
            ContentKind.SERIES: KindStats(unchanged=1, total=1),
        }
        result = CategorySyncResult(
            kinds=kinds,
            summary=CategorySyncSummary.from_kinds(kinds),
            sync_duration="0.10s",
            provider=ProviderRef(id="P", name="Provider P"),
            completed_at=datetime.now(UTC),
        )

        payload = result.to_payload()

        assert payload["Live TV"]["created"] == 2
        assert "error" not in payload["Live TV"]
        assert payload["VOD"]["error"] == "get_vod_categories timed out"
        assert payload["summary"]["totalCategories"] == 3
        assert payload["summary"]["totalCreated"] == 2
        assert payload["summary"]["totalUnchanged"] == 1
        assert payload["summary"]["kindsFailed"] == 1
        assert payload["syncDuration"] == "0.10s"
        assert payload["provider"] == {"id": "P", "name": "Provider P"}
        assert payload["success"] is True
        assert payload["failedKinds"] == ["VOD"]

    def test_stream_payload_shape(self) -> None:
        """스트림 결과 payload 형태."""
        result = StreamSyncResult(
            kind=ContentKind.LIVE,
            total=97,
            fetched=101,
            excluded=1,
            invalid=3,
            provider=ProviderRef(id="P", name="Provider P"),
        )

        payload = result.to_payload()

        assert payload["success"] is True
        assert payload["total"] == 97
        assert payload["kind"] == "Live TV"
        assert payload["syncDuration"] == "0.00s"
