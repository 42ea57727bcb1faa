"""Sync job model.

큐에 등록된 동기화 작업의 상태, 진행률, 결과, 잠금 정보를 관리합니다.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from src.models.kind import SyncJobKind


def generate_job_id() -> str:
    """작업 ID 생성 (job_ + 12자리 hex)."""
    return f"job_{uuid.uuid4().hex[:12]}"


class JobState(str, Enum):
    """작업 상태."""

    WAITING = "waiting"  # 대기 (최초 등록 또는 재시도 대기)
    ACTIVE = "active"  # 워커가 처리 중
    COMPLETED = "completed"  # 완료
    FAILED = "failed"  # 재시도 소진 후 최종 실패

    @property
    def is_terminal(self) -> bool:
        """최종 상태 여부."""
        return self in (JobState.COMPLETED, JobState.FAILED)


class SyncJob(BaseModel):
    """동기화 작업.

    Firestore Collection: sync_jobs
    """

    id: str = Field(default_factory=generate_job_id, description="작업 ID")
    kind: SyncJobKind = Field(..., description="작업 종류")
    provider_id: str = Field(..., description="대상 Provider ID")

    state: JobState = Field(JobState.WAITING, description="작업 상태")
    progress: int = Field(0, ge=0, le=100, description="진행률 (0~100)")
    progress_status: str = Field("", description="진행 상태 설명")
    result: dict[str, Any] | None = Field(None, description="동기화 결과")
    error: str | None = Field(None, description="마지막 에러 메시지")

    attempts_made: int = Field(0, ge=0, description="시도 횟수")
    max_attempts: int = Field(3, ge=1, description="최대 시도 횟수")
    stalled_count: int = Field(0, ge=0, description="잠금 만료(stalled) 횟수")

    lock_owner: str | None = Field(None, description="잠금 보유 워커")
    lock_expires_at: datetime | None = Field(None, description="잠금 만료 시간")

    created_at: datetime = Field(..., description="등록 시간")
    started_at: datetime | None = Field(None, description="마지막 시도 시작 시간")
    finished_at: datetime | None = Field(None, description="종료 시간")
    updated_at: datetime = Field(..., description="수정 시간")

    @property
    def attempts_exhausted(self) -> bool:
        """재시도 소진 여부."""
        return self.attempts_made >= self.max_attempts

    def to_status(self) -> dict[str, Any]:
        """외부 조회용 상태 요약."""
        status: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            "provider_id": self.provider_id,
            "state": self.state.value,
            "progress": self.progress,
            "status": self.progress_status,
            "attempts_made": self.attempts_made,
        }
        if self.state == JobState.COMPLETED:
            status["result"] = self.result
        elif self.error:
            status["error"] = self.error
        return status
