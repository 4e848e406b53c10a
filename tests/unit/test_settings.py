"""Unit tests for Settings validation and error bodies."""

import pytest

from quotegen.config.errors import ConfigurationError, ErrorCode, LLMError, ValidationError
from quotegen.config.settings import Settings
from tests.fixtures.fakes import make_settings


class TestSettings:
    """Tests for Settings.validate."""

    def test_valid_settings(self):
        make_settings().validate()

    def test_reports_every_problem(self):
        settings = make_settings(openai_api_key=None, match_threshold=1.5, catalog_search_mode="fuzzy")

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate()

        problems = exc_info.value.problems
        assert len(problems) == 3
        assert "OPENAI_API_KEY is required" in problems
        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LABOUR_RATE", "40")
        monkeypatch.setenv("USE_AI_KEYWORDS", "no")
        monkeypatch.setenv("CATALOG_BASE_URL", "https://shop.test/api/")

        settings = Settings()

        assert settings.labour_rate == 40
        assert settings.use_ai_keywords is False
        assert settings.catalog_base_url == "https://shop.test/api"


class TestErrors:
    """Tests for error serialisation."""

    def test_validation_error_carries_field(self):
        body = ValidationError("Missing job description", field="jobDescription").to_dict()

        assert body == {
            "error": "Missing job description",
            "code": ErrorCode.VALIDATION_ERROR,
            "details": {"field": "jobDescription"},
        }

    def test_llm_error_code_depends_on_transience(self):
        assert LLMError("busy", model="m", transient=True).code == ErrorCode.LLM_OVERLOADED
        assert LLMError("bad key", model="m").code == ErrorCode.LLM_ERROR
