"""Tests for settings and config file loading."""

import logging

import pytest

from valknobs_common.exceptions import ConfigurationError
from valknobs_common.retry import RetryConfig

from valknobs.config import ValidatorSettings, load_config_file, substitute_env_vars
from valknobs.validators import number


class TestSubstituteEnvVars:
    """Test ${VAR} and ${VAR:default} references."""

    def test_whole_value_is_converted(self, monkeypatch):
        monkeypatch.setenv("CHECK_TIMEOUT", "2.5")
        monkeypatch.setenv("STRICT", "true")
        data = substitute_env_vars({"timeout": "${CHECK_TIMEOUT}", "strict": "${STRICT}"})
        assert data == {"timeout": 2.5, "strict": True}

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("VALKNOBS_TEST_UNSET", raising=False)
        assert substitute_env_vars("${VALKNOBS_TEST_UNSET:5}") == 5

    def test_embedded_reference_stays_string(self, monkeypatch):
        monkeypatch.setenv("LOCALE_REGION", "US")
        assert substitute_env_vars("en-${LOCALE_REGION}") == "en-US"

    def test_nested_structures(self, monkeypatch):
        monkeypatch.setenv("ATTEMPTS", "3")
        assert substitute_env_vars({"retry": ["${ATTEMPTS}", 1]}) == {"retry": [3, 1]}

    def test_missing_without_default(self, monkeypatch):
        monkeypatch.delenv("VALKNOBS_TEST_UNSET", raising=False)
        with pytest.raises(ConfigurationError) as exc_info:
            substitute_env_vars({"a": "${VALKNOBS_TEST_UNSET}"})
        assert exc_info.value.context["variable"] == "VALKNOBS_TEST_UNSET"


class TestLoadConfigFile:
    """Test YAML and JSON loading."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "settings.yml"
        path.write_text("locale: vi\ndebounce: 0.3\n")
        assert load_config_file(path) == {"locale": "vi", "debounce": 0.3}

    def test_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"timeout": 5}')
        assert load_config_file(path) == {"timeout": 5}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_errors(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Failed to read"):
            load_config_file(tmp_path / "missing.yaml")

        broken = tmp_path / "broken.json"
        broken.write_text("{nope")
        with pytest.raises(ConfigurationError, match="Failed to parse"):
            load_config_file(broken)

        listing = tmp_path / "list.yaml"
        listing.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_config_file(listing)


class TestValidatorSettings:
    """Test settings construction."""

    def test_defaults(self):
        settings = ValidatorSettings()
        assert settings.locale == "en"
        assert settings.debounce is None
        assert settings.retry_max_attempts == 1
        assert settings.strict_objects is False

    def test_validation(self):
        with pytest.raises(ConfigurationError):
            ValidatorSettings(retry_max_attempts=0)
        with pytest.raises(ConfigurationError):
            ValidatorSettings(timeout=-1)

    def test_from_dict_ignores_unknown(self, caplog):
        with caplog.at_level(logging.WARNING):
            settings = ValidatorSettings.from_dict({"locale": "vi", "colour": "blue"})
        assert settings.locale == "vi"
        assert "colour" in caplog.text

    def test_from_file_with_section(self, tmp_path, monkeypatch):
        monkeypatch.setenv("VALIDATION_TIMEOUT", "7")
        path = tmp_path / "app.yaml"
        path.write_text(
            "validation:\n"
            "  timeout: ${VALIDATION_TIMEOUT:5}\n"
            "  retry_max_attempts: 3\n"
            "  strict_objects: true\n"
        )
        settings = ValidatorSettings.from_file(path)
        assert settings.timeout == 7
        assert settings.retry_max_attempts == 3
        assert settings.strict_objects is True

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("VALKNOBS_LOCALE", "1")
        monkeypatch.setenv("VALKNOBS_DEBOUNCE", "0.25")
        monkeypatch.setenv("VALKNOBS_STRICT_OBJECTS", "yes")
        settings = ValidatorSettings.from_env()
        assert settings.locale == "1"
        assert settings.debounce == 0.25
        assert settings.strict_objects is True

    def test_retry_config(self):
        config = ValidatorSettings(retry_max_attempts=4, retry_initial_delay=0.5).retry_config()
        assert isinstance(config, RetryConfig)
        assert config.max_attempts == 4
        assert config.initial_delay == 0.5

    def test_context_uses_locale(self):
        from valknobs.messages import register_locale

        register_locale("de-test", {"number": {"min": "Mindestens {min}"}})
        settings = ValidatorSettings(locale="de-test")
        result = number().min(3).validate(1, settings.context(1))
        assert result.errors[0].message == "Mindestens 3"
