"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from src.adapters.xtream_client import XtreamClient
from tests.utils import FakeFirestore


@pytest.fixture(autouse=True)
def set_test_env() -> None:
    """Set test environment variables."""
    os.environ.setdefault("GCP_PROJECT_ID", "test-project")
    os.environ.setdefault("FIRESTORE_EMULATOR_HOST", "localhost:8086")
    os.environ.setdefault("TASKS_MODE", "direct")


@pytest.fixture
def fake_firestore() -> FakeFirestore:
    """인메모리 Firestore."""
    return FakeFirestore()


@pytest.fixture
def provider_data() -> dict[str, Any]:
    """Active provider 문서 데이터."""
    return {
        "owner": "super-admin",
        "name": "Provider P",
        "apiEndpoint": "https://auth.example/issue",
        "dns": "https://d.example",
        "status": "Active",
        "maxConcurrentUsers": 3,
        "expiryHours": 24,
    }


@pytest.fixture
def credentials_body() -> dict[str, Any]:
    """자격증명 응답."""
    return {"username": "u-secret", "password": "p-secret"}


class FakeProviderAPI:
    """httpx.MockTransport 기반 provider API.

    catalogs: {action: 응답 JSON 또는 예외}
    requests: 수신한 요청 목록
    """

    def __init__(self, credentials: Any) -> None:
        self.credentials = credentials
        self.catalogs: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            return httpx.Response(200, json=self.credentials)

        action = request.url.params.get("action")
        body = self.catalogs.get(action, [])
        if isinstance(body, Exception):
            raise body
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json=body)


@pytest.fixture
def provider_api(credentials_body: dict[str, Any]) -> FakeProviderAPI:
    """가짜 provider API."""
    return FakeProviderAPI(credentials_body)


@pytest.fixture
def xtream_client(provider_api: FakeProviderAPI) -> XtreamClient:
    """가짜 provider API에 연결된 XtreamClient."""
    return XtreamClient(transport=httpx.MockTransport(provider_api))


@pytest.fixture
def category_items() -> Callable[[int], list[dict[str, Any]]]:
    """n개의 카테고리 원본 레코드 생성기."""

    def build(n: int) -> list[dict[str, Any]]:
        return [
            {"category_id": str(i), "category_name": f"Category {i}", "parent_id": 0}
            for i in range(1, n + 1)
        ]

    return build
