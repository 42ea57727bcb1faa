"""FastAPI application with lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.adapters.firestore_client import FirestoreClient
from src.adapters.tasks_client import RetryPolicy, TasksClient
from src.adapters.xtream_client import XtreamClient
from src.api.internal_tasks import router as internal_tasks_router
from src.api.sync import router as sync_router
from src.config.logging import configure_logging, get_logger
from src.config.settings import Settings
from src.models.kind import ContentKind
from src.repositories.category_repo import CategoryRepository
from src.repositories.job_repo import SyncJobRepository
from src.repositories.provider_repo import ProviderRepository
from src.repositories.stream_repo import build_stream_repositories
from src.services.batch_reconciler import BatchReconciler
from src.services.sync_orchestrator import SyncOrchestrator
from src.services.sync_worker import SyncWorker


def build_tasks_client(settings: Settings) -> TasksClient:
    """설정으로 TasksClient 생성."""
    return TasksClient(
        mode=settings.TASKS_MODE,
        project_id=settings.GCP_PROJECT_ID,
        location=settings.TASKS_LOCATION,
        queue=settings.TASKS_QUEUE,
        target_url=settings.TASKS_TARGET_URL,
        service_account_email=settings.TASKS_SERVICE_ACCOUNT_EMAIL,
        retry_policy=RetryPolicy(
            max_attempts=settings.SYNC_MAX_ATTEMPTS,
            base_delay_seconds=settings.SYNC_BACKOFF_BASE_SECONDS,
        ),
        concurrency=settings.TASKS_CONCURRENCY,
        dispatch_deadline_seconds=settings.SYNC_LOCK_DURATION_SECONDS,
    )


def build_sync_worker(
    settings: Settings,
    firestore: FirestoreClient,
    xtream: XtreamClient,
    tasks: TasksClient,
) -> SyncWorker:
    """리포지토리/서비스를 조립하여 SyncWorker 생성."""
    reconciler = BatchReconciler(
        category_repo=CategoryRepository(firestore),
        stream_repos=build_stream_repositories(firestore),
        batch_size=settings.SYNC_BATCH_SIZE,
    )
    orchestrator = SyncOrchestrator(
        provider_repo=ProviderRepository(firestore),
        xtream_client=xtream,
        reconciler=reconciler,
        exclusions={kind: settings.exclusions_for(kind) for kind in ContentKind},
        exclude_on_category_sync=settings.EXCLUDE_ON_CATEGORY_SYNC,
    )
    return SyncWorker(
        job_repo=SyncJobRepository(firestore),
        orchestrator=orchestrator,
        tasks_client=tasks,
        lock_duration_seconds=settings.SYNC_LOCK_DURATION_SECONDS,
        lock_renew_seconds=settings.SYNC_LOCK_RENEW_SECONDS,
        max_stalled_count=settings.SYNC_MAX_STALLED_COUNT,
        keep_completed=settings.JOBS_KEEP_COMPLETED,
        keep_failed=settings.JOBS_KEEP_FAILED,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Initializes resources on startup and cleans up on shutdown.
    """
    # Startup
    settings = Settings()  # type: ignore[call-arg]
    configure_logging(json_logs=settings.LOG_JSON, level=settings.LOG_LEVEL)
    logger = get_logger()

    logger.info(
        "Starting application",
        project_id=settings.GCP_PROJECT_ID,
        is_local=settings.is_local,
        tasks_mode=settings.TASKS_MODE,
    )

    # Initialize clients
    app.state.settings = settings
    app.state.firestore = FirestoreClient(project_id=settings.GCP_PROJECT_ID)
    app.state.xtream = XtreamClient(
        credentials_timeout=settings.CREDENTIALS_TIMEOUT_SECONDS,
        catalog_timeout=settings.CATALOG_TIMEOUT_SECONDS,
    )
    app.state.tasks = build_tasks_client(settings)
    app.state.tasks.apply_queue_config()
    app.state.worker = build_sync_worker(
        settings, app.state.firestore, app.state.xtream, app.state.tasks
    )

    logger.info("Application started successfully", worker_id=app.state.worker.worker_id)

    yield

    # Shutdown
    logger.info("Application shutting down")
    app.state.tasks.shutdown(wait=True)
    app.state.xtream.close()
    app.state.firestore.close()


app = FastAPI(
    title="Catalog Sync",
    description="Xtream-Codes IPTV 카탈로그 동기화 서비스",
    version="0.1.0",
    lifespan=lifespan,
)

# Register routers
app.include_router(sync_router)
app.include_router(internal_tasks_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Health status.
    """
    return {"status": "healthy"}
