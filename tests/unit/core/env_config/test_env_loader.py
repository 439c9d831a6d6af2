"""Tests for environment-based configuration."""

import pytest
from pydantic import ValidationError

from graph_http.core.config import ProviderConfig
from graph_http.core.env_config import ProviderSettings, load_from_env
from graph_http.core.logging.config import LogFormat, LogLevel


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run every test in an empty directory with no GRAPH_HTTP_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in [
        "GRAPH_HTTP_MAX_REDIRECTS",
        "GRAPH_HTTP_REDIRECT_STATUS_CODES",
        "GRAPH_HTTP_TIMEOUT_READ",
        "GRAPH_HTTP_VERIFY_SSL",
        "GRAPH_HTTP_LOG_ENABLED",
        "GRAPH_HTTP_LOG_LEVEL",
        "GRAPH_HTTP_LOG_FORMAT",
    ]:
        monkeypatch.delenv(name, raising=False)


class TestProviderSettings:
    """Test ProviderSettings validation."""

    def test_defaults(self):
        settings = ProviderSettings()

        assert settings.max_redirects == 5
        assert settings.redirect_status_codes == {301, 302, 303, 307, 308}
        assert settings.timeout_read == 100.0
        assert settings.log_enabled is False

    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("GRAPH_HTTP_MAX_REDIRECTS", "2")
        monkeypatch.setenv("GRAPH_HTTP_REDIRECT_STATUS_CODES", "[302, 307]")

        settings = ProviderSettings()

        assert settings.max_redirects == 2
        assert settings.redirect_status_codes == {302, 307}

    def test_rejects_non_redirect_status(self):
        with pytest.raises(ValidationError):
            ProviderSettings(redirect_status_codes={302, 404})

    def test_rejects_negative_redirects(self):
        with pytest.raises(ValidationError):
            ProviderSettings(max_redirects=-1)

    def test_file_logging_requires_path(self):
        with pytest.raises(ValidationError):
            ProviderSettings(log_enable_file=True)


class TestLoadFromEnv:
    """Test load_from_env."""

    def test_defaults(self):
        """Test an empty environment gives the default config."""
        config = load_from_env()

        assert isinstance(config, ProviderConfig)
        assert config.redirect.max_redirects == 5
        assert config.timeout.read == 100.0
        assert config.logging is None

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("GRAPH_HTTP_MAX_REDIRECTS", "3")
        monkeypatch.setenv("GRAPH_HTTP_TIMEOUT_READ", "30")
        monkeypatch.setenv("GRAPH_HTTP_VERIFY_SSL", "false")

        config = load_from_env()

        assert config.redirect.max_redirects == 3
        assert config.timeout.read == 30
        assert config.verify_ssl is False

    def test_overrides_win(self, monkeypatch):
        """Test keyword overrides beat the environment."""
        monkeypatch.setenv("GRAPH_HTTP_MAX_REDIRECTS", "3")

        config = load_from_env(max_redirects=8)

        assert config.redirect.max_redirects == 8

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "provider.env"
        env_file.write_text(
            "GRAPH_HTTP_MAX_REDIRECTS=1\n"
            "GRAPH_HTTP_REDIRECT_STATUS_CODES=[307, 308]\n"
            "GRAPH_HTTP_TIMEOUT_CONNECT=2.5\n"
        )

        config = load_from_env(env_file=str(env_file))

        assert config.redirect.max_redirects == 1
        assert config.redirect.redirect_status_codes == frozenset({307, 308})
        assert config.timeout.connect == 2.5

    def test_default_env_file_in_working_directory(self, tmp_path):
        (tmp_path / ".env").write_text("GRAPH_HTTP_MAX_REDIRECTS=4\n")

        assert load_from_env().redirect.max_redirects == 4

    def test_logging_enabled(self, monkeypatch):
        monkeypatch.setenv("GRAPH_HTTP_LOG_ENABLED", "true")
        monkeypatch.setenv("GRAPH_HTTP_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("GRAPH_HTTP_LOG_FORMAT", "json")

        config = load_from_env()

        assert config.logging is not None
        assert config.logging.level == LogLevel.DEBUG
        assert config.logging.format == LogFormat.JSON

    def test_invalid_value(self, monkeypatch):
        monkeypatch.setenv("GRAPH_HTTP_MAX_REDIRECTS", "many")

        with pytest.raises(ValidationError):
            load_from_env()
