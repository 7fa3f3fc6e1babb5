"""Tests for switchboard.config.secrets"""

import pytest

from switchboard.config.secrets import (
    CompositeSecretProvider,
    DockerSecretProvider,
    EnvSecretProvider,
    create_secret_provider,
)
from switchboard.core.exceptions import ConfigurationError, ErrorCode


class TestEnvSecretProvider:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        provider = EnvSecretProvider()
        assert provider.get_secret("OPENAI_API_KEY") == "sk-test"
        assert provider.has_secret("OPENAI_API_KEY") is True

    def test_empty_value_is_missing(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "")
        provider = EnvSecretProvider()
        assert provider.has_secret("OPENAI_API_KEY") is False
        with pytest.raises(ConfigurationError):
            provider.get_required("OPENAI_API_KEY")

    def test_prefix(self, monkeypatch):
        monkeypatch.setenv("APP_OPENAI_API_KEY", "sk-prefixed")
        assert EnvSecretProvider(prefix="APP_").get_secret("OPENAI_API_KEY") == "sk-prefixed"

    def test_get_required_names_the_credential(self, no_credentials):
        with pytest.raises(ConfigurationError) as exc_info:
            EnvSecretProvider().get_required("ANTHROPIC_API_KEY")
        error = exc_info.value
        assert error.credential == "ANTHROPIC_API_KEY"
        assert error.error_code == ErrorCode.CONFIGURATION_ERROR
        assert str(error) == "ANTHROPIC_API_KEY is not configured. AI generation is disabled."
        assert error.to_dict()["details"] == {"credential": "ANTHROPIC_API_KEY"}


class TestDockerSecretProvider:
    def test_reads_and_strips_secret_file(self, tmp_path):
        (tmp_path / "GOOGLE_AI_API_KEY").write_text("AIza-test\n")
        provider = DockerSecretProvider(tmp_path)
        assert provider.get_secret("GOOGLE_AI_API_KEY") == "AIza-test"

    def test_missing_file_returns_default(self, tmp_path):
        assert DockerSecretProvider(tmp_path).get_secret("NOPE", "fallback") == "fallback"


class TestCompositeSecretProvider:
    def test_first_provider_with_key_wins(self, tmp_path, monkeypatch):
        (tmp_path / "OPENAI_API_KEY").write_text("from-docker")
        monkeypatch.setenv("OPENAI_API_KEY", "from-env")
        provider = CompositeSecretProvider([DockerSecretProvider(tmp_path), EnvSecretProvider()])
        assert provider.get_secret("OPENAI_API_KEY") == "from-docker"

    def test_falls_through_to_later_providers(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "from-env")
        provider = CompositeSecretProvider([DockerSecretProvider(tmp_path), EnvSecretProvider()])
        assert provider.get_secret("OPENAI_API_KEY") == "from-env"
        assert provider.has_secret("OPENAI_API_KEY") is True


def test_factory(tmp_path):
    assert isinstance(create_secret_provider(), EnvSecretProvider)
    assert isinstance(create_secret_provider(tmp_path), CompositeSecretProvider)
