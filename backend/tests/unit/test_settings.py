"""Unit tests for environment configuration and request models."""

import pytest
from pydantic import ValidationError

from stroll_planner.models import RouteRequest
from stroll_planner.settings import DEFAULT_CATEGORIES_FILE, Settings, mask_key


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("GIS_API_KEY", "GIS_PAGE_SIZE", "REDIS_URL", "CORS_ORIGINS", "CATEGORIES_FILE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.gis_api_key == ""
        assert settings.gis_page_size == 10
        assert settings.redis_url is None
        assert settings.categories_file == DEFAULT_CATEGORIES_FILE
        assert "http://localhost:5173" in settings.cors_origins

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GIS_API_KEY", " abc123 ")
        monkeypatch.setenv("GIS_BASE_URL", "https://catalog.example.com/")
        monkeypatch.setenv("ROUTE_SEARCH_RADIUS", "1500")
        monkeypatch.setenv("GIS_TIMEOUT", "2.5")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

        settings = Settings.from_env()

        assert settings.gis_api_key == "abc123"
        assert settings.gis_base_url == "https://catalog.example.com"
        assert settings.search_radius_meters == 1500
        assert settings.gis_timeout == 2.5
        assert settings.cors_origins == ["https://a.example", "https://b.example"]

    def test_bad_number_uses_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ROUTE_CANDIDATE_LIMIT", "lots")
        assert Settings.from_env().candidate_limit == 30

    def test_mask_key(self) -> None:
        assert mask_key("abcdefgh") == "abcd****"
        assert mask_key("abc") == "****"
        assert mask_key(None) == "****"


class TestRouteRequest:
    BODY = {
        "city": " Kazan ",
        "description": "old town",
        "duration_hours": 2,
        "start_point": {"lat": 55.79, "lon": 49.12},
    }

    def test_city_is_trimmed(self) -> None:
        assert RouteRequest.model_validate(self.BODY).city == "Kazan"

    def test_blank_categories_dropped(self) -> None:
        request = RouteRequest.model_validate({**self.BODY, "categories": ["Parks", " ", ""]})
        assert request.categories == ["Parks"]

    def test_blank_description_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RouteRequest.model_validate({**self.BODY, "description": "  "})

    def test_duration_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            RouteRequest.model_validate({**self.BODY, "duration_hours": 0})

    def test_multi_day_duration_accepted(self) -> None:
        request = RouteRequest.model_validate({**self.BODY, "duration_hours": 25})
        assert request.duration_hours == 25

    def test_null_categories_become_empty(self) -> None:
        request = RouteRequest.model_validate({**self.BODY, "categories": None})
        assert request.categories == []
