"""Internal tasks endpoints for Cloud Tasks callbacks.

Cloud Tasks에서 호출되는 동기화 작업 핸들러입니다.
/internal/tasks/* 경로는 Cloud Run IAM + OIDC 토큰으로 보호됩니다.
"""

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from src.api.sync import get_sync_worker

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/internal/tasks", tags=["tasks"])


class SyncTaskRequest(BaseModel):
    """동기화 작업 실행 요청."""

    job_id: str


@router.post("/sync")
def sync_task(
    request: Request,
    body: SyncTaskRequest,
) -> dict[str, Any]:
    """동기화 작업 1회 시도.

    Cloud Tasks가 작업을 전달할 때마다 호출됩니다.
    재시도가 남은 시도가 실패하면 500을 반환하여 Cloud Tasks가 재전달하도록 합니다.
    다른 워커가 처리 중이면 잠금 만료 후 재확인 작업을 예약하고 200(active)을 반환합니다.

    Args:
        request: FastAPI 요청 객체
        body: 작업 ID를 포함한 요청 본문

    Returns:
        처리 결과
    """
    worker = get_sync_worker(request)

    try:
        job = worker.process(body.job_id)
    except Exception as e:
        logger.error(
            "sync_task_error",
            job_id=body.job_id,
            error=str(e),
        )
        raise HTTPException(
            status_code=500,
            detail={"status": "error", "error": str(e)},
        ) from e

    if job is None:
        # 이미 종료되었거나 없는 작업
        return {"status": "skipped", "job_id": body.job_id}

    return {"status": job.state.value, "job_id": job.id}
