"""Repository for SyncJob entities.

Firestore sync_jobs 컬렉션에 대한 데이터 접근 레이어.
작업 상태/진행률/결과와 워커 잠금(lease)을 관리합니다.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from src.adapters.firestore_client import FirestoreClient
from src.models.kind import SyncJobKind
from src.models.sync_job import JobState, SyncJob
from src.repositories.base import BaseRepository


class LockOutcome(str, Enum):
    """잠금 획득 결과."""

    ACQUIRED = "acquired"  # 새 시도 시작
    RECOVERED = "recovered"  # 잠금 만료된(stalled) 작업을 인수
    LOCKED = "locked"  # 다른 워커가 유효한 잠금 보유
    FINISHED = "finished"  # 이미 최종 상태
    STALLED_OUT = "stalled_out"  # stalled 허용 횟수 초과로 실패 처리
    MISSING = "missing"  # 작업 없음


class SyncJobRepository(BaseRepository[SyncJob]):
    """SyncJob 엔티티 Repository.

    Firestore Collection: sync_jobs
    """

    collection_name = "sync_jobs"
    model_class = SyncJob

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """Initialize SyncJobRepository.

        Args:
            firestore_client: Firestore 클라이언트 인스턴스.
        """
        super().__init__(firestore_client)

    def create_job(
        self, kind: SyncJobKind, provider_id: str, max_attempts: int
    ) -> SyncJob:
        """대기 상태의 작업 생성.

        Args:
            kind: 작업 종류.
            provider_id: 대상 provider ID.
            max_attempts: 최대 시도 횟수.

        Returns:
            생성된 작업.
        """
        now = datetime.now(UTC)
        job = SyncJob(
            kind=kind,
            provider_id=provider_id,
            max_attempts=max_attempts,
            created_at=now,
            updated_at=now,
        )
        self.create(job)
        return job

    def acquire_lock(
        self,
        job_id: str,
        owner: str,
        lock_duration: timedelta,
        max_stalled_count: int,
    ) -> LockOutcome:
        """트랜잭션으로 작업 잠금 획득 및 시도 횟수 증가.

        잠금이 만료된 active 작업은 stalled로 간주하여 인수하고,
        stalled 횟수가 max_stalled_count를 넘으면 실패 처리합니다.

        Args:
            job_id: 작업 ID.
            owner: 워커 식별자.
            lock_duration: 잠금 유지 시간.
            max_stalled_count: 허용 stalled 횟수.

        Returns:
            잠금 획득 결과.
        """
        outcome = LockOutcome.MISSING

        def decide(current: dict[str, Any] | None) -> dict[str, Any] | None:
            nonlocal outcome
            if current is None:
                outcome = LockOutcome.MISSING
                return None

            now = datetime.now(UTC)
            state = JobState(current.get("state", JobState.WAITING.value))
            if state.is_terminal:
                outcome = LockOutcome.FINISHED
                return None

            lock_expires_at = current.get("lock_expires_at")
            lock_live = lock_expires_at is not None and lock_expires_at > now
            if state == JobState.ACTIVE and lock_live:
                outcome = LockOutcome.LOCKED
                return None

            changes: dict[str, Any] = {"updated_at": now}
            if state == JobState.ACTIVE:
                stalled_count = current.get("stalled_count", 0) + 1
                changes["stalled_count"] = stalled_count
                if stalled_count > max_stalled_count:
                    outcome = LockOutcome.STALLED_OUT
                    changes.update(
                        state=JobState.FAILED.value,
                        error=f"Job stalled more than {max_stalled_count} time(s)",
                        lock_owner=None,
                        lock_expires_at=None,
                        finished_at=now,
                    )
                    return changes
                outcome = LockOutcome.RECOVERED
            else:
                outcome = LockOutcome.ACQUIRED

            changes.update(
                state=JobState.ACTIVE.value,
                attempts_made=current.get("attempts_made", 0) + 1,
                lock_owner=owner,
                lock_expires_at=now + lock_duration,
                started_at=now,
            )
            return changes

        self._db.transact(self.collection_name, job_id, decide)
        return outcome

    def renew_lock(self, job_id: str, owner: str, lock_duration: timedelta) -> bool:
        """보유 중인 잠금 연장.

        Args:
            job_id: 작업 ID.
            owner: 워커 식별자.
            lock_duration: 연장할 잠금 시간.

        Returns:
            연장 성공 여부 (잠금을 잃었으면 False).
        """

        def extend(current: dict[str, Any] | None) -> dict[str, Any] | None:
            if current is None or current.get("lock_owner") != owner:
                return None
            now = datetime.now(UTC)
            return {"lock_expires_at": now + lock_duration, "updated_at": now}

        return self._db.transact(self.collection_name, job_id, extend) is not None

    def update_progress(self, job_id: str, progress: int, status: str) -> None:
        """진행률 갱신.

        Args:
            job_id: 작업 ID.
            progress: 진행률 (0~100).
            status: 진행 상태 설명.
        """
        self._db.update(
            self.collection_name,
            job_id,
            {
                "progress": max(0, min(100, progress)),
                "progress_status": status,
                "updated_at": datetime.now(UTC),
            },
        )

    def mark_completed(self, job_id: str, owner: str, result: dict[str, Any]) -> bool:
        """작업 완료 처리 및 잠금 해제 (잠금 보유자만).

        Args:
            job_id: 작업 ID.
            owner: 워커 식별자.
            result: 동기화 결과 payload.

        Returns:
            기록 여부 (잠금을 잃었으면 False).
        """

        def complete(current: dict[str, Any] | None) -> dict[str, Any] | None:
            if current is None or current.get("lock_owner") != owner:
                return None
            now = datetime.now(UTC)
            return {
                "state": JobState.COMPLETED.value,
                "progress": 100,
                "result": result,
                "error": None,
                "lock_owner": None,
                "lock_expires_at": None,
                "finished_at": now,
                "updated_at": now,
            }

        return self._db.transact(self.collection_name, job_id, complete) is not None

    def mark_attempt_failed(
        self, job_id: str, owner: str, error: str, terminal: bool
    ) -> bool:
        """시도 실패 처리 및 잠금 해제 (잠금 보유자만).

        Args:
            job_id: 작업 ID.
            owner: 워커 식별자.
            error: 에러 메시지.
            terminal: True면 최종 실패(failed), False면 재시도 대기(waiting).

        Returns:
            기록 여부 (잠금을 잃었으면 False).
        """

        def fail(current: dict[str, Any] | None) -> dict[str, Any] | None:
            if current is None or current.get("lock_owner") != owner:
                return None
            now = datetime.now(UTC)
            changes: dict[str, Any] = {
                "state": (JobState.FAILED if terminal else JobState.WAITING).value,
                "error": error,
                "lock_owner": None,
                "lock_expires_at": None,
                "updated_at": now,
            }
            if terminal:
                changes["finished_at"] = now
            return changes

        return self._db.transact(self.collection_name, job_id, fail) is not None

    def prune_finished(self, state: JobState, keep: int) -> int:
        """최종 상태 작업 중 오래된 것 삭제.

        Args:
            state: COMPLETED 또는 FAILED.
            keep: 보관할 최근 작업 수.

        Returns:
            삭제된 작업 수.
        """
        jobs = self.find_by([("state", "==", state.value)])

        # 애플리케이션 레벨에서 최신순 정렬
        jobs.sort(key=lambda j: j.finished_at or j.updated_at, reverse=True)

        stale = jobs[keep:]
        for job in stale:
            self.delete(job.id)
        return len(stale)
