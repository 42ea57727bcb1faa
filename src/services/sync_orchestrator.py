"""Sync orchestrator.

provider 검증 → 자격증명 해석 → 종류별 {수집 → 필터 → 정규화 → 반영} → 집계
파이프라인을 관리합니다.
"""

import contextvars
import re
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

import structlog

from src.adapters.firestore_client import StoreUnavailableError
from src.adapters.xtream_client import ProviderCredentials, XtreamClient
from src.models.category import Category
from src.models.kind import ContentKind, SyncJobKind
from src.models.provider import Provider
from src.models.stream import StreamRecord
from src.models.sync_result import (
    CategorySyncResult,
    CategorySyncSummary,
    KindStats,
    ProviderRef,
    StreamSyncResult,
    format_duration,
)
from src.repositories.provider_repo import ProviderRepository
from src.services.batch_reconciler import BatchReconciler
from src.services.category_filter import CategoryExclusionFilter
from src.services.record_normalizer import (
    InvalidRecord,
    normalize_category,
    normalize_stream,
)

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[int, str], None]

_PROVIDER_ID = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class SyncError(Exception):
    """동기화 작업 실패 (재시도해도 결과가 같은 설정/입력 오류)."""


class InvalidProviderIdError(SyncError):
    """provider ID 형식 오류."""


class ProviderNotFoundError(SyncError):
    """provider 없음."""


class ProviderNotActiveError(SyncError):
    """provider 상태가 Active가 아님."""


class ProgressReporter:
    """종류별로 균등 분할된 진행률 보고기.

    보고는 잠금 안에서 순서대로 이루어지며 진행률은 감소하지 않습니다.
    진행률은 참고용이므로 콜백 실패는 로그만 남기고 무시합니다.
    """

    def __init__(
        self, callback: ProgressCallback | None, kinds: Sequence[ContentKind]
    ) -> None:
        self._callback = callback
        self._fractions = {kind: 0.0 for kind in kinds}
        self._last = 0
        self._lock = threading.Lock()

    def update(self, kind: ContentKind, fraction: float, status: str) -> None:
        """종류별 진행 비율(0.0~1.0) 갱신."""
        with self._lock:
            self._fractions[kind] = max(0.0, min(1.0, fraction))
            progress = int(100 * sum(self._fractions.values()) / len(self._fractions))
            self._emit(max(progress, self._last), status)

    def complete(self) -> None:
        """완료 보고."""
        with self._lock:
            self._emit(100, "Completed")

    def _emit(self, progress: int, status: str) -> None:
        self._last = progress
        if self._callback is None:
            return
        try:
            self._callback(progress, status)
        except Exception as e:
            logger.warning("progress_report_failed", status=status, error=str(e))


class SyncOrchestrator:
    """provider 카탈로그 동기화 오케스트레이터.

    카테고리 동기화는 세 종류를 병렬로 실행하며, 한 종류의 실패는 다른 종류를
    취소하지 않고 해당 종류의 통계에 기록됩니다. 스트림 동기화는 단일 종류이며
    실패 시 작업 전체가 실패합니다.
    """

    def __init__(
        self,
        provider_repo: ProviderRepository,
        xtream_client: XtreamClient,
        reconciler: BatchReconciler,
        exclusions: dict[ContentKind, list[str]] | None = None,
        exclude_on_category_sync: bool = False,
    ) -> None:
        """SyncOrchestrator 초기화.

        Args:
            provider_repo: provider 리포지토리
            xtream_client: provider API 클라이언트
            reconciler: 배치 반영기
            exclusions: 종류별 카테고리 제외 목록
            exclude_on_category_sync: 카테고리 동기화에도 제외 목록 적용 여부
        """
        self.provider_repo = provider_repo
        self.xtream_client = xtream_client
        self.reconciler = reconciler
        self.filters = {
            kind: CategoryExclusionFilter((exclusions or {}).get(kind, []))
            for kind in ContentKind
        }
        self.exclude_on_category_sync = exclude_on_category_sync

    def run(
        self,
        job_kind: SyncJobKind,
        provider_id: str,
        progress: ProgressCallback | None = None,
    ) -> CategorySyncResult | StreamSyncResult:
        """작업 종류에 맞는 동기화 실행."""
        content_kind = job_kind.content_kind
        if content_kind is None:
            return self.sync_categories(provider_id, progress)
        return self.sync_streams(provider_id, content_kind, progress)

    # -------------------------------------------------------------------------
    # Category sync
    # -------------------------------------------------------------------------

    def sync_categories(
        self, provider_id: str, progress: ProgressCallback | None = None
    ) -> CategorySyncResult:
        """세 종류(Live TV / VOD / Series) 카테고리 동기화.

        Raises:
            SyncError: provider 검증 실패.
            CredentialError: 자격증명 해석 실패.
            StoreUnavailableError: 저장소 연결 실패.
        """
        started = time.monotonic()
        provider = self._load_provider(provider_id)
        credentials = self._resolve_credentials(provider)
        dns = self._content_dns(provider, credentials)

        kinds = list(ContentKind)
        reporter = ProgressReporter(progress, kinds)
        stats = {kind: KindStats() for kind in kinds}

        with ThreadPoolExecutor(
            max_workers=len(kinds), thread_name_prefix="category-sync"
        ) as executor:
            futures = {
                kind: executor.submit(
                    # 스레드마다 로깅 컨텍스트(job_id 등) 복사
                    contextvars.copy_context().run,
                    self._sync_category_kind,
                    provider,
                    dns,
                    credentials,
                    kind,
                    stats[kind],
                    reporter,
                )
                for kind in kinds
            }

        store_error: StoreUnavailableError | None = None
        for kind, future in futures.items():
            error = future.exception()
            if error is None:
                continue
            stats[kind].error = str(error)
            logger.error(
                "category_kind_failed",
                provider_id=provider.id,
                kind=kind.value,
                error=str(error),
            )
            if isinstance(error, StoreUnavailableError) and store_error is None:
                store_error = error

        if store_error is not None:
            raise store_error

        reporter.complete()

        result = CategorySyncResult(
            kinds=stats,
            summary=CategorySyncSummary.from_kinds(stats),
            sync_duration=format_duration(time.monotonic() - started),
            provider=ProviderRef(id=provider.id, name=provider.name),
            completed_at=datetime.now(UTC),
        )
        logger.info(
            "category_sync_completed",
            provider_id=provider.id,
            created=result.summary.total_created,
            updated=result.summary.total_updated,
            unchanged=result.summary.total_unchanged,
            invalid=result.summary.total_invalid,
            failed_kinds=[k.value for k in result.failed_kinds],
            duration=result.sync_duration,
        )
        return result

    def _sync_category_kind(
        self,
        provider: Provider,
        dns: str,
        credentials: ProviderCredentials,
        kind: ContentKind,
        stats: KindStats,
        reporter: ProgressReporter,
    ) -> None:
        """단일 종류 카테고리 동기화 (stats를 직접 갱신)."""
        log = logger.bind(provider_id=provider.id, kind=kind.value)
        reporter.update(kind, 0.0, f"Syncing {kind.value} categories...")

        raw = self.xtream_client.fetch_catalog(dns, credentials, kind.category_action)
        stats.total = len(raw)

        if self.exclude_on_category_sync:
            kept = self.filters[kind].filter(raw)
            stats.excluded = len(raw) - len(kept)
            raw = kept

        categories: list[Category] = []
        for item in raw:
            normalized = normalize_category(item, provider.id, kind)
            if isinstance(normalized, InvalidRecord):
                stats.invalid += 1
                log.debug("category_invalid", reason=normalized.reason)
            else:
                categories.append(normalized)

        batch_count = self.reconciler.batch_count(categories)
        seen: dict[str, str] = {}
        processed = 0
        for index, batch in enumerate(self.reconciler.batches(categories), start=1):
            reporter.update(
                kind,
                processed / len(categories),
                f"Processing {kind.value} batch {index}/{batch_count}",
            )
            stats.add(self.reconciler.reconcile_categories(batch, seen))
            processed += len(batch)
            reporter.update(
                kind,
                processed / len(categories),
                f"Processed {processed}/{len(categories)} {kind.value} records",
            )

        reporter.update(kind, 1.0, f"Synced {kind.value} categories")
        log.info(
            "category_kind_synced",
            total=stats.total,
            created=stats.created,
            updated=stats.updated,
            unchanged=stats.unchanged,
            invalid=stats.invalid,
            excluded=stats.excluded,
        )

    # -------------------------------------------------------------------------
    # Stream sync
    # -------------------------------------------------------------------------

    def sync_streams(
        self,
        provider_id: str,
        kind: ContentKind,
        progress: ProgressCallback | None = None,
    ) -> StreamSyncResult:
        """단일 종류 스트림 동기화.

        Raises:
            SyncError: provider 검증 실패.
            CredentialError: 자격증명 해석 실패.
            FetchError: 카탈로그 수집 실패.
            StoreUnavailableError: 저장소 연결 실패.
        """
        started = time.monotonic()
        provider = self._load_provider(provider_id)
        credentials = self._resolve_credentials(provider)
        dns = self._content_dns(provider, credentials)

        reporter = ProgressReporter(progress, [kind])
        reporter.update(kind, 0.0, f"Syncing {kind.value} streams...")

        raw = self.xtream_client.fetch_catalog(dns, credentials, kind.stream_action)
        kept = self.filters[kind].filter(raw)

        result = StreamSyncResult(
            kind=kind,
            fetched=len(raw),
            excluded=len(raw) - len(kept),
            provider=ProviderRef(id=provider.id, name=provider.name),
        )

        secrets = (credentials.username, credentials.password)
        synced_at = datetime.now(UTC)
        records: list[StreamRecord] = []
        for item in kept:
            normalized = normalize_stream(item, provider.id, kind, secrets, synced_at)
            if isinstance(normalized, InvalidRecord):
                result.invalid += 1
            else:
                records.append(normalized)

        batch_count = self.reconciler.batch_count(records)
        processed = 0
        for index, batch in enumerate(self.reconciler.batches(records), start=1):
            reporter.update(
                kind,
                processed / len(records),
                f"Processing {kind.value} batch {index}/{batch_count}",
            )
            stats = self.reconciler.reconcile_streams(batch, kind)
            result.total += stats.written
            result.invalid += stats.invalid
            processed += len(batch)

        reporter.complete()
        result.sync_duration = format_duration(time.monotonic() - started)

        logger.info(
            "stream_sync_completed",
            provider_id=provider.id,
            kind=kind.value,
            fetched=result.fetched,
            excluded=result.excluded,
            invalid=result.invalid,
            upserted=result.total,
            duration=result.sync_duration,
        )
        return result

    # -------------------------------------------------------------------------
    # Shared stages
    # -------------------------------------------------------------------------

    def _load_provider(self, provider_id: str) -> Provider:
        """provider 검증 (네트워크 호출 전 1회).

        Raises:
            InvalidProviderIdError: ID 형식 오류.
            ProviderNotFoundError: provider 없음.
            ProviderNotActiveError: 상태가 Active가 아님.
        """
        if not provider_id or not _PROVIDER_ID.match(provider_id):
            raise InvalidProviderIdError(f"Invalid provider ID format: {provider_id!r}")

        provider = self.provider_repo.get_by_id(provider_id)
        if provider is None:
            raise ProviderNotFoundError(f"Provider not found: {provider_id}")

        if not provider.is_active:
            raise ProviderNotActiveError(
                f"Provider is {provider.status.value}. "
                "Only Active providers can be synced."
            )
        return provider

    def _resolve_credentials(self, provider: Provider) -> ProviderCredentials:
        """자격증명 해석 (실패 시 작업 전체 중단)."""
        credentials = self.xtream_client.resolve_credentials(provider.api_endpoint)
        logger.info("credentials_resolved", provider_id=provider.id)
        return credentials

    def _content_dns(self, provider: Provider, credentials: ProviderCredentials) -> str:
        """콘텐츠 API 기본 URL (provider 설정 우선)."""
        dns = (provider.dns or credentials.dns or "").rstrip("/")
        if not dns:
            raise SyncError("Invalid provider credentials - missing: dns")
        return dns
