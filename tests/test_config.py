"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from tagmatch.config import (
    LoggingConfig,
    Settings,
    TagRule,
    expand_env_vars,
    get_settings,
    load_settings,
    load_yaml_config,
)


class TestLoadSettings:
    def test_loads_yaml(self, sample_config_yaml: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TAGMATCH_TEST_REGION", "eu")

        settings = load_settings(sample_config_yaml)

        assert settings.tags == ["qa", "eu"]
        assert [rule.name for rule in settings.rules] == ["seed-data", "audit", "legacy-cleanup"]
        assert settings.rules[2].enabled is False
        assert settings.rules[0].description == "Load fixture rows"
        assert settings.logging.level == "DEBUG"

    def test_unset_env_var_expands_to_nothing(self, sample_config_yaml: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("TAGMATCH_TEST_REGION", raising=False)
        assert load_settings(sample_config_yaml).tags == ["qa"]

    def test_environment_overrides_yaml(self, sample_config_yaml: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TAGMATCH_TAGS", "prod, us")
        monkeypatch.setenv("TAGMATCH_LOGGING__LEVEL", "error")

        settings = load_settings(sample_config_yaml)

        assert settings.tags == ["prod", "us"]
        assert settings.logging.level == "ERROR"
        assert settings.logging.format == "console"

    def test_defaults_without_file(self):
        settings = load_settings()
        assert settings.tags == []
        assert settings.rules == []
        assert settings.logging.level == "WARNING"

    def test_picks_up_default_file(self, temp_dir: Path):
        (temp_dir / "tagmatch.yaml").write_text("tags: [a, b]\n")
        assert load_settings().tags == ["a", "b"]

    def test_missing_explicit_file(self, temp_dir: Path):
        with pytest.raises(FileNotFoundError):
            load_settings(temp_dir / "missing.yaml")

    def test_empty_file(self, temp_dir: Path):
        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert load_yaml_config(path) == {}

    def test_get_settings_caches(self, sample_config_yaml: Path):
        first = get_settings(sample_config_yaml)
        assert get_settings() is first
        assert get_settings(sample_config_yaml, reload=True) is not first


class TestValidation:
    def test_rule_with_unbalanced_parentheses(self):
        with pytest.raises(ValidationError, match="Cannot parse expression"):
            TagRule(name="bad", expression="(a and b")

    def test_rule_expression_trimmed(self):
        assert TagRule(name="r", expression="  a or b ").expression == "a or b"
        assert TagRule(name="r", expression=None).expression == ""

    def test_rule_requires_name(self):
        with pytest.raises(ValidationError):
            TagRule(name="", expression="a")

    def test_duplicate_rule_names(self):
        with pytest.raises(ValidationError, match="Duplicate rule name"):
            Settings(rules=[{"name": "a", "expression": "x"}, {"name": "a", "expression": "y"}])

    def test_tags_from_string(self):
        assert Settings(tags="a, b, A").tags == ["a", "b"]

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_log_values_normalized(self):
        config = LoggingConfig(level="debug", format="JSON")
        assert config.level == "DEBUG"
        assert config.format == "json"


def test_expand_env_vars(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("REGION", "eu")
    config = {"tags": ["${REGION}", "qa"], "nested": {"value": "x-${REGION}-y"}, "count": 3}
    assert expand_env_vars(config) == {"tags": ["eu", "qa"], "nested": {"value": "x-eu-y"}, "count": 3}
