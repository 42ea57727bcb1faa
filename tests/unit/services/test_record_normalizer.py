"""Tests for record normalizer."""

from datetime import UTC, datetime
from typing import Any

import pytest

from src.models.category import Category
from src.models.kind import ContentKind
from src.models.stream import LiveStream, SeriesStream, StreamStatus
from src.services.record_normalizer import (
    InvalidRecord,
    normalize_category,
    normalize_stream,
)


class TestNormalizeCategory:
    """Tests for normalize_category."""

    @pytest.mark.parametrize("raw_id", ["81", "0081", 81])
    def test_pads_to_four_digits(self, raw_id: Any) -> None:
        """'81'과 '0081'은 모두 '0081'로 저장."""
        result = normalize_category(
            {"category_id": raw_id, "category_name": " News "}, "P", ContentKind.LIVE
        )

        assert isinstance(result, Category)
        assert result.category_id == "0081"
        assert result.category_name == "News"
        assert result.id == "P_live_0081"
        assert result.parent_id is None
        assert result.category_type == ContentKind.LIVE

    def test_longer_ids_not_truncated(self) -> None:
        """4자리를 넘는 ID는 그대로."""
        result = normalize_category({"category_id": "12345"}, "P", ContentKind.VOD)

        assert isinstance(result, Category)
        assert result.category_id == "12345"
        assert result.category_name == ""

    @pytest.mark.parametrize(
        "raw",
        [
            {"category_id": "abc"},
            {"category_id": "-1"},
            {"category_id": ""},
            {"category_name": "No id"},
            {"category_id": True},
            "not-a-dict",
        ],
    )
    def test_invalid(self, raw: Any) -> None:
        """숫자가 아닌 ID는 InvalidRecord."""
        result = normalize_category(raw, "P", ContentKind.LIVE)

        assert isinstance(result, InvalidRecord)
        assert result.raw == raw


class TestNormalizeStream:
    """Tests for normalize_stream."""

    def test_passes_provider_metadata_through(self) -> None:
        """provider 필드 보존 + provider/status/synced_at 설정."""
        synced_at = datetime(2026, 1, 1, tzinfo=UTC)
        raw = {
            "stream_id": "42",
            "name": "Channel 42",
            "category_id": "5",
            "stream_icon": "https://img.example/42.png",
            "status": "INACTIVE",
        }

        result = normalize_stream(raw, "P", ContentKind.LIVE, synced_at=synced_at)

        assert isinstance(result, LiveStream)
        assert result.stream_id == 42
        assert result.provider == "P"
        assert result.status == StreamStatus.ACTIVE
        assert result.synced_at == synced_at
        assert result.to_document()["stream_icon"] == "https://img.example/42.png"

    def test_series_requires_series_id(self) -> None:
        """시리즈는 series_id 필수."""
        ok = normalize_stream({"series_id": 7, "name": "Show"}, "P", ContentKind.SERIES)
        missing = normalize_stream({"stream_id": 7}, "P", ContentKind.SERIES)

        assert isinstance(ok, SeriesStream)
        assert isinstance(missing, InvalidRecord)

    @pytest.mark.parametrize("stream_id", ["12a", None, -3, 1.5, True, ""])
    def test_invalid_identifier(self, stream_id: Any) -> None:
        """숫자가 아닌 식별자는 InvalidRecord."""
        result = normalize_stream({"stream_id": stream_id}, "P", ContentKind.VOD)

        assert isinstance(result, InvalidRecord)

    def test_drops_credentials_and_curation(self) -> None:
        """접속 정보/자격증명 값/큐레이션 필드는 저장하지 않음."""
        raw = {
            "stream_id": 1,
            "username": "u-secret",
            "password": "p-secret",
            "dns": "https://d.example",
            "direct_source": "p-secret",
            "feature": True,
            "favorite": True,
            "name": "Movie",
        }

        result = normalize_stream(
            raw, "P", ContentKind.VOD, secrets=("u-secret", "p-secret")
        )

        assert not isinstance(result, InvalidRecord)
        document = result.to_document()
        for key in ("username", "password", "dns", "direct_source", "feature", "favorite"):
            assert key not in document
        assert "u-secret" not in document.values()
        assert "p-secret" not in document.values()
        assert document["name"] == "Movie"

    def test_schema_failure_is_invalid(self) -> None:
        """스키마 검증 실패는 InvalidRecord."""
        result = normalize_stream(
            {"stream_id": 1, "category_ids": "not-a-list"}, "P", ContentKind.LIVE
        )

        assert isinstance(result, InvalidRecord)
        assert "schema validation failed" in result.reason
