"""Sync job API endpoints.

동기화 작업 등록 및 상태 조회 API입니다.
"""

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from src.models.kind import SyncJobKind
from src.services.sync_worker import SyncWorker

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


class EnqueueSyncResponse(BaseModel):
    """작업 등록 응답."""

    job_id: str


def get_sync_worker(request: Request) -> SyncWorker:
    """lifespan에서 생성된 SyncWorker 조회."""
    return request.app.state.worker


@router.post("/{kind}/{provider_id}", status_code=202)
def enqueue_sync(
    request: Request,
    kind: SyncJobKind,
    provider_id: str,
) -> EnqueueSyncResponse:
    """동기화 작업 등록.

    작업은 즉시 등록되고 실제 동기화는 워커에서 비동기로 실행됩니다.
    provider 검증은 작업 실행 시 수행됩니다.

    Args:
        request: FastAPI 요청 객체
        kind: 작업 종류 (sync-category / sync-live / sync-vod / sync-series)
        provider_id: 대상 provider ID

    Returns:
        등록된 작업 ID
    """
    worker = get_sync_worker(request)
    try:
        job = worker.enqueue_sync(kind, provider_id)
    except Exception as e:
        logger.error(
            "sync_enqueue_failed",
            kind=kind.value,
            provider_id=provider_id,
            error=str(e),
        )
        raise HTTPException(
            status_code=500,
            detail={"status": "error", "error": str(e)},
        ) from e

    return EnqueueSyncResponse(job_id=job.id)


@router.get("/jobs/{job_id}")
def get_sync_job(
    request: Request,
    job_id: str,
) -> dict[str, Any]:
    """작업 상태/결과 조회.

    Args:
        request: FastAPI 요청 객체
        job_id: 작업 ID

    Returns:
        작업 상태 (completed면 result, 실패 시 error 포함)
    """
    job = get_sync_worker(request).get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job.to_status()
