"""Sync job worker.

큐에서 전달된 동기화 작업을 잠금(lease) 하에 실행하고,
진행률/결과/에러를 sync_jobs 문서에 기록합니다.
"""

import math
import os
import socket
import threading
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from src.adapters.tasks_client import TasksClient
from src.models.kind import SyncJobKind
from src.models.sync_job import JobState, SyncJob
from src.repositories.job_repo import LockOutcome, SyncJobRepository
from src.services.sync_orchestrator import SyncOrchestrator

logger = structlog.get_logger(__name__)

SYNC_TASK_TYPE = "sync"
LOCK_RECHECK_MARGIN_SECONDS = 5


def default_worker_id() -> str:
    """워커 식별자 (host:pid:random)."""
    return f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:6]}"


class LockRenewer:
    """작업 실행 동안 주기적으로 잠금을 연장하는 백그라운드 스레드."""

    def __init__(
        self,
        job_repo: SyncJobRepository,
        job_id: str,
        owner: str,
        lock_duration: timedelta,
        interval_seconds: float,
    ) -> None:
        self._job_repo = job_repo
        self._job_id = job_id
        self._owner = owner
        self._lock_duration = lock_duration
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"lock-renew-{job_id}", daemon=True
        )

    def __enter__(self) -> "LockRenewer":
        self._thread.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._stop.set()
        self._thread.join()

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                renewed = self._job_repo.renew_lock(
                    self._job_id, self._owner, self._lock_duration
                )
            except Exception as e:
                logger.warning("lock_renew_error", job_id=self._job_id, error=str(e))
                continue
            if not renewed:
                logger.warning("lock_lost", job_id=self._job_id, owner=self._owner)
                return


class SyncWorker:
    """동기화 작업 워커.

    - 시도마다 잠금 획득 및 attempts_made 증가 (부분 재개 없이 처음부터 재실행)
    - 성공: completed + 결과 저장
    - 실패: 시도 소진 시 failed 기록 후 종료, 아니면 waiting 후 예외 재전파 (큐가 재시도)
    """

    def __init__(
        self,
        job_repo: SyncJobRepository,
        orchestrator: SyncOrchestrator,
        tasks_client: TasksClient,
        lock_duration_seconds: int = 600,
        lock_renew_seconds: float = 15,
        max_stalled_count: int = 1,
        keep_completed: int = 100,
        keep_failed: int = 200,
        worker_id: str | None = None,
    ) -> None:
        """SyncWorker 초기화.

        Args:
            job_repo: 작업 리포지토리
            orchestrator: 동기화 오케스트레이터
            tasks_client: 작업 큐 클라이언트 (direct 모드 핸들러 등록)
            lock_duration_seconds: 잠금 유지 시간
            lock_renew_seconds: 잠금 갱신 주기
            max_stalled_count: 허용 stalled 횟수
            keep_completed: 보관할 완료 작업 수
            keep_failed: 보관할 실패 작업 수
            worker_id: 워커 식별자
        """
        self.job_repo = job_repo
        self.orchestrator = orchestrator
        self.tasks_client = tasks_client
        self.lock_duration = timedelta(seconds=lock_duration_seconds)
        self.lock_renew_seconds = lock_renew_seconds
        self.max_stalled_count = max_stalled_count
        self.keep_completed = keep_completed
        self.keep_failed = keep_failed
        self.worker_id = worker_id or default_worker_id()

        tasks_client.register_handler(SYNC_TASK_TYPE, self.handle_task)

    def enqueue_sync(self, kind: SyncJobKind, provider_id: str) -> SyncJob:
        """동기화 작업 등록 (즉시 반환, 실행은 비동기).

        Args:
            kind: 작업 종류.
            provider_id: 대상 provider ID.

        Returns:
            등록된 작업.
        """
        job = self.job_repo.create_job(
            kind, provider_id, self.tasks_client.retry_policy.max_attempts
        )
        self.tasks_client.enqueue(SYNC_TASK_TYPE, {"job_id": job.id}, task_id=job.id)
        logger.info(
            "sync_job_enqueued", job_id=job.id, kind=kind.value, provider_id=provider_id
        )
        return job

    def get_job(self, job_id: str) -> SyncJob | None:
        """작업 조회."""
        return self.job_repo.get_by_id(job_id)

    def handle_task(self, payload: dict[str, Any]) -> None:
        """큐 핸들러.

        Args:
            payload: {"job_id": "..."}

        Raises:
            ValueError: job_id 누락.
            Exception: 재시도가 남은 시도가 실패한 경우 (큐 재시도 대상).
                마지막 시도의 실패는 작업을 failed로 기록하고 예외를 전파하지 않습니다.
        """
        job_id = payload.get("job_id")
        if not job_id:
            raise ValueError("job_id is required")
        self.process(job_id)

    def process(self, job_id: str) -> SyncJob | None:
        """작업 1회 시도.

        Args:
            job_id: 작업 ID.

        Returns:
            처리 후 작업 상태 (이미 종료되었거나 없는 작업이면 None).
            다른 워커가 잠금을 보유 중이면 재확인 작업을 예약하고 active 상태를 반환.
        """
        outcome = self.job_repo.acquire_lock(
            job_id, self.worker_id, self.lock_duration, self.max_stalled_count
        )
        if outcome == LockOutcome.STALLED_OUT:
            logger.error("sync_job_stalled_out", job_id=job_id)
            self._prune(JobState.FAILED)
            return self.job_repo.get_by_id(job_id)
        if outcome == LockOutcome.LOCKED:
            return self._schedule_recheck(job_id)
        if outcome not in (LockOutcome.ACQUIRED, LockOutcome.RECOVERED):
            logger.info("sync_job_skipped", job_id=job_id, reason=outcome.value)
            return None
        if outcome == LockOutcome.RECOVERED:
            logger.warning("sync_job_stalled", job_id=job_id)

        job = self.job_repo.get_by_id(job_id)
        if job is None:
            return None

        with structlog.contextvars.bound_contextvars(
            job_id=job.id, provider_id=job.provider_id, job_kind=job.kind.value
        ):
            return self._run_attempt(job)

    def _run_attempt(self, job: SyncJob) -> SyncJob | None:
        logger.info(
            "sync_job_started", attempt=job.attempts_made, max_attempts=job.max_attempts
        )

        def report(progress: int, status: str) -> None:
            self.job_repo.update_progress(job.id, progress, status)

        try:
            with LockRenewer(
                self.job_repo,
                job.id,
                self.worker_id,
                self.lock_duration,
                self.lock_renew_seconds,
            ):
                result = self.orchestrator.run(job.kind, job.provider_id, report)
        except Exception as e:
            terminal = job.attempts_exhausted
            if not self.job_repo.mark_attempt_failed(
                job.id, self.worker_id, str(e), terminal=terminal
            ):
                logger.warning("sync_job_lock_lost", error=str(e))
                return self.job_repo.get_by_id(job.id)
            if not terminal:
                logger.warning(
                    "sync_job_retry_scheduled",
                    attempt=job.attempts_made,
                    max_attempts=job.max_attempts,
                    error=str(e),
                )
                raise
            logger.error("sync_job_failed", attempts=job.attempts_made, error=str(e))
            self._prune(JobState.FAILED)
            return self.job_repo.get_by_id(job.id)

        payload = result.to_payload()
        if not self.job_repo.mark_completed(job.id, self.worker_id, payload):
            logger.warning("sync_job_lock_lost", total=payload.get("total"))
            return self.job_repo.get_by_id(job.id)
        logger.info(
            "sync_job_completed",
            summary=payload.get("summary"),
            total=payload.get("total"),
        )
        self._prune(JobState.COMPLETED)
        return self.job_repo.get_by_id(job.id)

    def _schedule_recheck(self, job_id: str) -> SyncJob | None:
        """잠금 만료 직후 다시 시도하도록 지연 작업 예약.

        큐의 시도 횟수를 소모하지 않으므로, 잠금 보유 워커가 죽어도
        만료 후 재전달에서 stalled 복구가 이루어집니다.
        """
        job = self.job_repo.get_by_id(job_id)
        if job is None:
            return None
        delay = LOCK_RECHECK_MARGIN_SECONDS
        if job.lock_expires_at is not None:
            remaining = (job.lock_expires_at - datetime.now(UTC)).total_seconds()
            delay += max(0, math.ceil(remaining))
        self.tasks_client.enqueue(
            SYNC_TASK_TYPE, {"job_id": job_id}, delay_seconds=delay
        )
        logger.info(
            "sync_job_locked",
            job_id=job_id,
            lock_owner=job.lock_owner,
            recheck_in_seconds=delay,
        )
        return job

    def _prune(self, state: JobState) -> None:
        """보관 개수를 넘는 최종 상태 작업 정리."""
        keep = self.keep_completed if state == JobState.COMPLETED else self.keep_failed
        try:
            removed = self.job_repo.prune_finished(state, keep)
        except Exception as e:
            logger.warning("job_prune_failed", state=state.value, error=str(e))
            return
        if removed:
            logger.info("jobs_pruned", state=state.value, removed=removed)
