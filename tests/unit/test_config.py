"""Tests for application configuration."""

import pytest

from pagescope.config import (
    RuntimeEnvironment,
    Settings,
    detect_runtime_environment,
    get_settings,
    resolve_runtime_environment,
)
from pagescope.constants import (
    BROWSER_PHASE_TIMEOUT_SECONDS,
    DEFAULT_SUMMARIZER_URL,
    HTTP_PHASE_TIMEOUT_SECONDS,
)


class TestSettings:
    """Test Settings model validation."""

    def test_settings_default_values(self, monkeypatch):
        """Test that default values are set correctly when not overridden by env."""
        for key in (
            "ENV",
            "RUNTIME_ENVIRONMENT",
            "SUMMARIZER_URL",
            "HTTP_PHASE_TIMEOUT_SECONDS",
            "BROWSER_PHASE_TIMEOUT_SECONDS",
            "INCLUDE_RAW_HTML",
        ):
            monkeypatch.delenv(key, raising=False)

        settings = Settings(_env_file=None)

        assert settings.env == "local"
        assert settings.runtime_environment is None
        assert settings.http_phase_timeout_seconds == HTTP_PHASE_TIMEOUT_SECONDS
        assert settings.browser_phase_timeout_seconds == BROWSER_PHASE_TIMEOUT_SECONDS
        assert settings.summarizer_url == DEFAULT_SUMMARIZER_URL
        assert settings.include_raw_html is False
        assert settings.sentry_dsn is None

    def test_http_phase_never_exceeds_overall_budget(self):
        assert HTTP_PHASE_TIMEOUT_SECONDS == 15
        assert BROWSER_PHASE_TIMEOUT_SECONDS == 25

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("RUNTIME_ENVIRONMENT", "serverless")
        monkeypatch.setenv("INCLUDE_RAW_HTML", "true")
        monkeypatch.setenv("BROWSER_EXECUTABLE_PATH", "/opt/chrome")

        settings = Settings(_env_file=None)

        assert settings.runtime_environment is RuntimeEnvironment.SERVERLESS
        assert settings.include_raw_html is True
        assert settings.browser_executable_path == "/opt/chrome"

    def test_invalid_env_rejected(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, env="production")

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestRuntimeEnvironment:
    @pytest.mark.parametrize(
        "marker",
        ["VERCEL", "NETLIFY", "AWS_LAMBDA_FUNCTION_VERSION", "APIFY_IS_AT_HOME"],
    )
    def test_serverless_markers(self, marker):
        assert detect_runtime_environment({marker: "1"}) is RuntimeEnvironment.SERVERLESS

    def test_no_markers_is_local(self):
        assert detect_runtime_environment({"HOME": "/root"}) is RuntimeEnvironment.LOCAL

    def test_empty_marker_value_is_ignored(self):
        assert detect_runtime_environment({"VERCEL": ""}) is RuntimeEnvironment.LOCAL

    def test_explicit_setting_wins(self):
        settings = Settings(_env_file=None, runtime_environment="local")
        environ = {"VERCEL": "1"}

        assert resolve_runtime_environment(settings, environ) is RuntimeEnvironment.LOCAL

    def test_falls_back_to_detection(self):
        settings = Settings(_env_file=None, runtime_environment=None)

        assert (
            resolve_runtime_environment(settings, {"NETLIFY": "true"})
            is RuntimeEnvironment.SERVERLESS
        )
