"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from autocoder.config import DEFAULT_MODEL, AutocoderSettings, get_settings


@pytest.fixture
def required_env(monkeypatch):
    monkeypatch.setenv("AUTOCODER_GITHUB_TOKEN", "ghp_test")
    monkeypatch.setenv("AUTOCODER_REPOSITORY", "acme/widgets")


class TestAutocoderSettings:
    """Tests for AutocoderSettings."""

    def test_defaults(self, required_env):
        settings = get_settings()

        assert settings.github_token == "ghp_test"
        assert settings.repository == "acme/widgets"
        assert settings.github_base_url == "https://api.github.com"
        assert settings.base_branch == "main"
        assert settings.anthropic_api_key == ""
        assert settings.mock_mode is False
        assert settings.llm_model == DEFAULT_MODEL
        assert settings.max_output_tokens == 4096
        assert settings.concurrency == 3
        assert settings.log_level == "info"

    def test_owner_and_repo_name(self, required_env):
        settings = get_settings()

        assert settings.owner == "acme"
        assert settings.repo_name == "widgets"

    def test_unprefixed_github_actions_names(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghs_actions")
        monkeypatch.setenv("GITHUB_REPOSITORY", "org/repo")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

        settings = get_settings()

        assert settings.github_token == "ghs_actions"
        assert settings.repository == "org/repo"
        assert settings.anthropic_api_key == "sk-ant-test"

    def test_prefixed_names_take_precedence(self, required_env, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghs_actions")

        assert get_settings().github_token == "ghp_test"

    def test_env_overrides(self, required_env, monkeypatch):
        monkeypatch.setenv("AUTOCODER_MOCK_MODE", "true")
        monkeypatch.setenv("AUTOCODER_CONCURRENCY", "5")
        monkeypatch.setenv("AUTOCODER_LOG_LEVEL", "DEBUG")

        settings = get_settings()

        assert settings.mock_mode is True
        assert settings.concurrency == 5
        assert settings.log_level == "debug"

    def test_keyword_overrides_win(self, required_env):
        settings = get_settings(repository="other/repo", mock_mode=True)

        assert settings.repository == "other/repo"
        assert settings.mock_mode is True

    def test_none_overrides_are_ignored(self, required_env):
        settings = get_settings(repository=None, log_level=None)

        assert settings.repository == "acme/widgets"
        assert settings.log_level == "info"

    def test_missing_token_fails(self, monkeypatch):
        monkeypatch.setenv("AUTOCODER_REPOSITORY", "acme/widgets")

        with pytest.raises(ValidationError):
            get_settings()

    def test_blank_token_fails(self, required_env, monkeypatch):
        monkeypatch.setenv("AUTOCODER_GITHUB_TOKEN", "   ")

        with pytest.raises(ValidationError, match="github_token"):
            get_settings()

    @pytest.mark.parametrize("repository", ["widgets", "a/b/c", "/widgets", "acme/"])
    def test_malformed_repository_fails(self, required_env, repository):
        with pytest.raises(ValidationError, match="owner/name"):
            get_settings(repository=repository)

    def test_invalid_base_url_fails(self, required_env, monkeypatch):
        monkeypatch.setenv("AUTOCODER_GITHUB_BASE_URL", "api.github.com")

        with pytest.raises(ValidationError):
            get_settings()

    @pytest.mark.parametrize("field", ["concurrency", "max_output_tokens"])
    def test_non_positive_limits_fail(self, required_env, field):
        with pytest.raises(ValidationError):
            get_settings(**{field: 0})

    def test_unknown_log_level_fails(self, required_env):
        with pytest.raises(ValidationError, match="log_level"):
            get_settings(log_level="verbose")

    def test_direct_construction(self):
        settings = AutocoderSettings(github_token="t", repository="a/b")

        assert settings.repository == "a/b"
