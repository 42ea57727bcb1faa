"""Cloud Tasks client with in-process direct execution mode."""

import json
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

import structlog
from google.cloud import tasks_v2
from google.protobuf import duration_pb2, field_mask_pb2, timestamp_pb2

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy applied uniformly to every task.

    Attributes:
        max_attempts: Total attempts, including the first one.
        base_delay_seconds: Delay before the second attempt.
        backoff: Only "exponential" (delay doubles each attempt) is supported.
    """

    max_attempts: int = 3
    base_delay_seconds: float = 5.0
    backoff: str = "exponential"

    def delay_for(self, attempt: int) -> float:
        """Delay before retrying after the given (1-based) failed attempt."""
        return self.base_delay_seconds * (2 ** (attempt - 1))


class TasksClient:
    """Client for Cloud Tasks with local execution fallback.

    In 'direct' mode, tasks run on an in-process worker pool with the retry
    policy applied locally. In 'cloud_tasks' mode, tasks are enqueued to
    Cloud Tasks, which delivers and retries them.
    """

    def __init__(
        self,
        mode: str = "direct",
        project_id: str | None = None,
        location: str = "asia-northeast3",
        queue: str = "default",
        target_url: str | None = None,
        service_account_email: str | None = None,
        retry_policy: RetryPolicy | None = None,
        concurrency: int = 1,
        dispatch_deadline_seconds: int | None = None,
    ) -> None:
        """Initialize Tasks client.

        Args:
            mode: 'direct' for local execution, 'cloud_tasks' for Cloud Tasks.
            project_id: GCP project ID (required for cloud_tasks mode).
            location: Cloud Tasks location.
            queue: Queue name.
            target_url: HTTP target URL for tasks.
            service_account_email: Service account for OIDC auth.
            retry_policy: Attempts and backoff for every task.
            concurrency: Worker threads in direct mode; max concurrent dispatches
                in cloud_tasks mode.
            dispatch_deadline_seconds: How long Cloud Tasks waits for a handler.

        Raises:
            ValueError: If cloud_tasks mode is missing required config.
        """
        self._mode = mode
        self._handlers: dict[str, Callable[[dict[str, Any]], None]] = {}
        self._retry_policy = retry_policy or RetryPolicy()
        self._dispatch_deadline_seconds = dispatch_deadline_seconds
        self._concurrency = max(1, concurrency)

        if mode == "cloud_tasks":
            if not project_id:
                raise ValueError("project_id is required for cloud_tasks mode")
            if not target_url:
                raise ValueError("target_url is required for cloud_tasks mode")

            self._client = tasks_v2.CloudTasksClient()
            self._queue_path = self._client.queue_path(project_id, location, queue)
            self._target_url = target_url
            self._service_account_email = service_account_email
        else:
            self._executor = ThreadPoolExecutor(
                max_workers=self._concurrency, thread_name_prefix="sync-worker"
            )
            self._shutdown = threading.Event()

    @property
    def retry_policy(self) -> RetryPolicy:
        """The retry policy applied to tasks."""
        return self._retry_policy

    def register_handler(
        self, task_type: str, handler: Callable[[dict[str, Any]], None]
    ) -> None:
        """Register a handler for direct mode execution.

        Args:
            task_type: Task type identifier.
            handler: Function to handle the task payload.
        """
        self._handlers[task_type] = handler

    def enqueue(
        self,
        task_type: str,
        payload: dict[str, Any],
        task_id: str | None = None,
        delay_seconds: int | None = None,
    ) -> str | None:
        """Enqueue a task for execution.

        Args:
            task_type: Task type identifier.
            payload: Task payload data.
            task_id: Optional task ID for deduplication.
            delay_seconds: Optional delay before execution.

        Returns:
            Task name in cloud_tasks mode, None in direct mode.

        Raises:
            ValueError: If task_type is unknown in direct mode.
        """
        if self._mode == "direct":
            self._submit_direct(task_type, payload, delay_seconds)
            return None
        return self._enqueue_cloud_tasks(task_type, payload, task_id, delay_seconds)

    def apply_queue_config(self) -> None:
        """Write the retry policy and dispatch concurrency onto the Cloud Tasks queue.

        No-op in direct mode, where both are applied in-process.
        """
        if self._mode != "cloud_tasks":
            return

        policy = self._retry_policy
        queue = tasks_v2.Queue(
            name=self._queue_path,
            retry_config=tasks_v2.RetryConfig(
                max_attempts=policy.max_attempts,
                min_backoff=duration_pb2.Duration(
                    seconds=int(policy.base_delay_seconds)
                ),
                max_doublings=max(0, policy.max_attempts - 1),
            ),
            rate_limits=tasks_v2.RateLimits(
                max_concurrent_dispatches=self._concurrency,
            ),
        )
        self._client.update_queue(
            queue=queue,
            update_mask=field_mask_pb2.FieldMask(paths=["retry_config", "rate_limits"]),
        )
        logger.info(
            "queue_config_applied",
            queue=self._queue_path,
            max_attempts=policy.max_attempts,
            base_delay_seconds=policy.base_delay_seconds,
            max_concurrent_dispatches=self._concurrency,
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting direct tasks and drain the pool."""
        if self._mode != "direct":
            return
        self._shutdown.set()
        self._executor.shutdown(wait=wait)

    def _submit_direct(
        self, task_type: str, payload: dict[str, Any], delay_seconds: int | None
    ) -> Future[None]:
        """Schedule a task on the in-process pool."""
        if task_type not in self._handlers:
            raise ValueError(f"Unknown task type: {task_type}")
        return self._executor.submit(
            self._execute_direct, task_type, payload, delay_seconds or 0
        )

    def _execute_direct(
        self, task_type: str, payload: dict[str, Any], delay_seconds: float = 0
    ) -> None:
        """Run a task with the retry policy (direct mode)."""
        handler = self._handlers[task_type]
        policy = self._retry_policy

        if delay_seconds and self._shutdown.wait(delay_seconds):
            return

        for attempt in range(1, policy.max_attempts + 1):
            try:
                handler(payload)
                return
            except Exception as e:
                if attempt >= policy.max_attempts:
                    logger.error(
                        "task_attempts_exhausted",
                        task_type=task_type,
                        attempts=attempt,
                        error=str(e),
                    )
                    return

                delay = policy.delay_for(attempt)
                logger.warning(
                    "task_retry_scheduled",
                    task_type=task_type,
                    attempt=attempt,
                    delay_seconds=delay,
                    error=str(e),
                )
                if self._shutdown.wait(delay):
                    logger.warning("task_retry_cancelled_on_shutdown", task_type=task_type)
                    return

    def _enqueue_cloud_tasks(
        self,
        task_type: str,
        payload: dict[str, Any],
        task_id: str | None,
        delay_seconds: int | None,
    ) -> str:
        """Enqueue task to Cloud Tasks."""
        import datetime

        task: dict[str, Any] = {
            "http_request": {
                "http_method": tasks_v2.HttpMethod.POST,
                "url": f"{self._target_url}/{task_type}",
                "headers": {"Content-Type": "application/json"},
                "body": json.dumps(payload).encode(),
            }
        }

        if self._service_account_email:
            task["http_request"]["oidc_token"] = {
                "service_account_email": self._service_account_email,
                "audience": self._target_url,
            }

        if task_id:
            task["name"] = f"{self._queue_path}/tasks/{task_id}"

        if self._dispatch_deadline_seconds:
            task["dispatch_deadline"] = duration_pb2.Duration(
                seconds=self._dispatch_deadline_seconds
            )

        if delay_seconds:
            schedule_time = timestamp_pb2.Timestamp()
            schedule_time.FromDatetime(
                datetime.datetime.now(tz=datetime.UTC)
                + datetime.timedelta(seconds=delay_seconds)
            )
            task["schedule_time"] = schedule_time

        response = self._client.create_task(parent=self._queue_path, task=task)  # type: ignore[arg-type]
        return response.name
