"""Tests for Category and Provider models."""

import pytest
from pydantic import ValidationError

from src.models.category import Category, generate_category_key
from src.models.kind import ContentKind
from src.models.provider import Provider, ProviderStatus


class TestCategory:
    """Tests for Category model."""

    def test_generate_key(self) -> None:
        """문서 ID는 (provider, 종류, category_id) 조합."""
        assert generate_category_key("P", ContentKind.VOD, "0081") == "P_vod_0081"
        assert generate_category_key("P", ContentKind.LIVE, "0081") != (
            generate_category_key("P", ContentKind.VOD, "0081")
        )

    def test_valid_category(self) -> None:
        """유효한 카테고리 생성."""
        category = Category(
            id="P_live_0081",
            category_id="0081",
            category_name="News",
            provider="P",
            category_type=ContentKind.LIVE,
        )

        assert category.parent_id is None
        assert category.category_type == "Live TV"

    @pytest.mark.parametrize("category_id", ["81", "abcd", "00 1"])
    def test_category_id_must_be_padded_digits(self, category_id: str) -> None:
        """category_id는 4자리 이상 숫자 문자열."""
        with pytest.raises(ValidationError):
            Category(
                id="x",
                category_id=category_id,
                provider="P",
                category_type=ContentKind.LIVE,
            )

    def test_parent_id_single_digit(self) -> None:
        """parent_id는 한 자리 숫자 문자열."""
        with pytest.raises(ValidationError):
            Category(
                id="x",
                category_id="0001",
                parent_id="12",
                provider="P",
                category_type=ContentKind.LIVE,
            )


class TestProvider:
    """Tests for Provider model."""

    def test_camel_case_fields(self) -> None:
        """Firestore 문서의 camelCase 필드 매핑."""
        provider = Provider(
            id="P",
            owner="super-admin",
            name="Provider P",
            apiEndpoint="https://auth.example",
            maxConcurrentUsers=2,
        )

        assert provider.api_endpoint == "https://auth.example"
        assert provider.max_concurrent_users == 2
        assert provider.dns is None
        assert provider.is_active is True

    def test_suspended_is_not_active(self) -> None:
        """Active가 아니면 동기화 불가."""
        provider = Provider(
            id="P",
            owner="o",
            name="n",
            api_endpoint="https://auth.example",
            status=ProviderStatus.SUSPENDED,
        )

        assert provider.is_active is False
