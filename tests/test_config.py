"""Unit tests for configuration module with pydantic-settings."""

import pytest
from pydantic import ValidationError

from doorkeeper.config import (
    JIRA_OPTIONS,
    DoorkeeperConfig,
    get_config,
    reset_config,
)
from doorkeeper.models import PublishAction


class TestDefaults:
    def test_default_values(self):
        config = DoorkeeperConfig(_env_file=None)

        assert config.jira_post_comment is True
        assert config.jira_post_link is True
        assert config.jira_instance_url == ""
        assert config.jira_domain == ""
        assert config.jira_provider_type == "jira"
        assert config.jira_request_timeout == 15.0
        assert config.log_level == "INFO"
        assert config.log_format == "json"

    def test_both_actions_enabled_by_default(self):
        config = DoorkeeperConfig(_env_file=None)

        assert config.enabled_actions() == (
            PublishAction.POST_COMMENT,
            PublishAction.POST_REMOTE_LINK,
        )

    def test_option_metadata_matches_defaults(self):
        config = DoorkeeperConfig(_env_file=None)

        for option in JIRA_OPTIONS.values():
            assert getattr(config, option["field"]) is option["default"]


class TestEnvironmentOverrides:
    def test_flags_from_environment(self, monkeypatch):
        monkeypatch.setenv("JIRA_POST_COMMENT", "false")
        monkeypatch.setenv("JIRA_POST_LINK", "true")

        config = DoorkeeperConfig(_env_file=None)

        assert config.enabled_actions() == (PublishAction.POST_REMOTE_LINK,)

    def test_both_flags_disabled(self, monkeypatch):
        monkeypatch.setenv("JIRA_POST_COMMENT", "0")
        monkeypatch.setenv("JIRA_POST_LINK", "0")

        assert DoorkeeperConfig(_env_file=None).enabled_actions() == ()

    def test_instance_url_normalized(self, monkeypatch):
        monkeypatch.setenv("JIRA_INSTANCE_URL", "  https://jira.example.com/ ")

        config = DoorkeeperConfig(_env_file=None)

        assert config.jira_instance_url == "https://jira.example.com"

    def test_instance_domain_from_url_host(self, monkeypatch):
        monkeypatch.setenv("JIRA_INSTANCE_URL", "https://JIRA.example.com:8443/jira")

        assert DoorkeeperConfig(_env_file=None).instance_domain() == "jira.example.com"

    def test_instance_domain_override(self, monkeypatch):
        monkeypatch.setenv("JIRA_INSTANCE_URL", "https://10.0.0.5")
        monkeypatch.setenv("JIRA_DOMAIN", " Jira.Corp.Example ")

        assert DoorkeeperConfig(_env_file=None).instance_domain() == "jira.corp.example"

    def test_empty_env_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("JIRA_PROVIDER_TYPE", "")

        assert DoorkeeperConfig(_env_file=None).jira_provider_type == "jira"

    def test_env_file_loaded(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("JIRA_POST_LINK=false\nJIRA_INSTANCE_URL=https://j.example\n")

        config = DoorkeeperConfig(_env_file=env_file)

        assert config.jira_post_link is False
        assert config.jira_instance_url == "https://j.example"


class TestValidation:
    def test_instance_url_requires_http_scheme(self):
        with pytest.raises(ValidationError, match="http"):
            DoorkeeperConfig(_env_file=None, jira_instance_url="jira.example.com")

    def test_timeout_bounds(self):
        with pytest.raises(ValidationError):
            DoorkeeperConfig(_env_file=None, jira_request_timeout=0)

    def test_log_level_pattern(self):
        with pytest.raises(ValidationError):
            DoorkeeperConfig(_env_file=None, log_level="VERBOSE")

    def test_config_is_frozen(self):
        config = DoorkeeperConfig(_env_file=None)

        with pytest.raises(ValidationError):
            config.jira_post_link = False


class TestSingleton:
    def test_get_config_cached(self):
        assert get_config() is get_config()

    def test_reset_config_reloads(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("JIRA_POST_COMMENT", "false")
        reset_config()

        second = get_config()

        assert second is not first
        assert second.jira_post_comment is False
