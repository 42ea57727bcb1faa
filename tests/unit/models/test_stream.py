"""Tests for stream models."""

import pytest
from pydantic import ValidationError

from src.models.stream import (
    LiveStream,
    SeriesStream,
    StreamStatus,
    VodStream,
    generate_stream_key,
)


class TestStreamRecord:
    """Tests for StreamRecord subclasses."""

    def test_extra_metadata_preserved(self) -> None:
        """선언되지 않은 provider 필드는 보존."""
        stream = LiveStream(
            provider="P",
            stream_id=42,
            name="Channel 42",
            stream_icon="https://img.example/42.png",
            epg_channel_id="c42",
        )

        data = stream.to_document()
        assert data["name"] == "Channel 42"
        assert data["epg_channel_id"] == "c42"
        assert stream.key == "P_42"

    def test_category_id_stringified(self) -> None:
        """숫자 category_id는 문자열로 저장."""
        stream = VodStream(provider="P", stream_id=1, category_id=35)

        assert stream.category_id == "35"

    def test_curation_fields_not_written(self) -> None:
        """feature/favorite는 저장 문서에서 제외."""
        stream = VodStream(provider="P", stream_id=1, feature=True, favorite=True)

        data = stream.to_document()
        assert "feature" not in data
        assert "favorite" not in data

    def test_series_uses_series_id(self) -> None:
        """시리즈 키는 series_id 기반."""
        series = SeriesStream(provider="P", series_id=7)

        assert series.record_id == 7
        assert series.key == generate_stream_key("P", 7)

    def test_series_rejects_hidden(self) -> None:
        """시리즈는 HIDDEN 상태를 지원하지 않음."""
        with pytest.raises(ValidationError):
            SeriesStream(provider="P", series_id=7, status=StreamStatus.HIDDEN)

    def test_live_allows_hidden(self) -> None:
        """라이브는 HIDDEN 상태 허용."""
        stream = LiveStream(provider="P", stream_id=1, status=StreamStatus.HIDDEN)

        assert stream.status == StreamStatus.HIDDEN

    def test_negative_id_rejected(self) -> None:
        """음수 식별자는 거부."""
        with pytest.raises(ValidationError):
            LiveStream(provider="P", stream_id=-1)
