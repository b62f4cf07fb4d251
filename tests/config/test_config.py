"""Tests for configuration loading."""

import logging

import pytest

from optirules.config import (
    GeneralConfig,
    OptiRulesConfig,
    RoutingConfig,
    configure_logging,
    load_config,
)
from optirules.exceptions import ConfigurationError


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        """A missing file yields the defaults."""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        config = load_config(str(tmp_path / "missing.yaml"))

        assert config.routing == RoutingConfig()
        assert config.general.log_level == "INFO"
        assert config.general.database_url is None

    def test_database_url_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///rules.db")
        config = load_config(str(tmp_path / "missing.yaml"))
        assert config.general.database_url == "sqlite+aiosqlite:///rules.db"

    def test_full_file(self, tmp_path, monkeypatch):
        """Routing and general settings are read, env references resolved."""
        monkeypatch.setenv("RULES_DB", "postgresql+asyncpg://u:p@db/rules")
        path = tmp_path / "config.yaml"
        path.write_text(
            "routing_settings:\n"
            "  enabled: false\n"
            "  default_model: gpt-4o-mini\n"
            "  include_team_rules: true\n"
            "general_settings:\n"
            "  database_url: os.environ/RULES_DB\n"
            "  log_level: debug\n"
            "  sql_echo: 'true'\n"
            "  db_pool_size: 5\n"
        )

        config = load_config(str(path))

        assert config.routing.enabled is False
        assert config.routing.default_model == "gpt-4o-mini"
        assert config.routing.include_team_rules is True
        assert config.general.database_url == "postgresql+asyncpg://u:p@db/rules"
        assert config.general.log_level == "DEBUG"
        assert config.general.sql_echo is True
        assert config.general.db_pool_size == 5
        assert config.general.db_max_overflow == 20

    def test_braced_env_reference(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DEFAULT_MODEL", "claude-haiku")
        path = tmp_path / "config.yaml"
        path.write_text("routing_settings:\n  default_model: ${DEFAULT_MODEL}\n")

        assert load_config(str(path)).routing.default_model == "claude-haiku"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert isinstance(load_config(str(path)), OptiRulesConfig)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("routing_settings: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_bad_pool_size(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("general_settings:\n  db_pool_size: many\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path))


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_package_level(self):
        config = OptiRulesConfig(general=GeneralConfig(log_level="WARNING"))
        configure_logging(config)
        assert logging.getLogger("optirules").level == logging.WARNING

    def test_unknown_level(self):
        config = OptiRulesConfig(general=GeneralConfig(log_level="LOUD"))
        with pytest.raises(ConfigurationError):
            configure_logging(config)
