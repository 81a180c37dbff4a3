"""Tests for configuration validation with Pydantic."""

import pytest
import requests
import yaml
from pydantic import ValidationError

from waitfor.domain.config import AppConfig, ProbeConfig, RetryConfig
from waitfor.domain.config.retry import resolve_exception_class
from waitfor.domain.errors import ConfigurationError
from waitfor.infrastructure.config.config_manager import ConfigManager


class TestRetryConfigValidation:
    """Tests for RetryConfig validation."""

    def test_valid_retry_config(self):
        """Test valid retry configuration"""
        config = RetryConfig(max_attempts=3, timeout=2.5, initial_delay=0.1, retry_on=[ValueError])
        assert config.max_attempts == 3
        assert config.retry_on == (ValueError,)
        assert config.has_deadline

    def test_max_attempts_zero(self):
        """Test max_attempts must be positive"""
        with pytest.raises(ValidationError, match="max_attempts"):
            RetryConfig(max_attempts=0)

    def test_max_attempts_float(self):
        """Test max_attempts must be an integer"""
        with pytest.raises(ValidationError, match="max_attempts"):
            RetryConfig(max_attempts=1.1)

    def test_max_attempts_integral_float(self):
        """Test max_attempts is not coerced from float"""
        with pytest.raises(ValidationError, match="max_attempts"):
            RetryConfig(max_attempts=2.0)

    def test_negative_delay(self):
        """Test initial_delay must not be negative"""
        with pytest.raises(ValidationError, match="initial_delay"):
            RetryConfig(initial_delay=-1)

    def test_negative_timeout(self):
        """Test timeout must not be negative"""
        with pytest.raises(ValidationError, match="timeout"):
            RetryConfig(timeout=-0.5)

    @pytest.mark.parametrize("field", ["timeout", "initial_delay"])
    @pytest.mark.parametrize("value", [float("inf"), float("nan"), "inf"])
    def test_non_finite_rejected(self, field, value):
        """Test timeout and delay must be finite numbers"""
        with pytest.raises(ValidationError, match=field):
            RetryConfig(**{field: value})

    @pytest.mark.parametrize("timeout", [None, 0])
    def test_timeout_disabled(self, timeout):
        """Test None or 0 disables the deadline"""
        assert not RetryConfig(timeout=timeout).has_deadline

    def test_frozen(self):
        """Test configuration is immutable"""
        config = RetryConfig()
        with pytest.raises(ValidationError):
            config.max_attempts = 10

    def test_unknown_field_rejected(self):
        """Test unknown fields are rejected"""
        with pytest.raises(ValidationError, match="extra"):
            RetryConfig(backoff_multiplier=3)

    def test_retry_on_names_resolved(self):
        """Test builtin names and dotted paths resolve to classes"""
        config = RetryConfig(retry_on=["ConnectionError", "requests.exceptions.RequestException"])
        assert config.retry_on == (ConnectionError, requests.exceptions.RequestException)

    def test_retry_on_unknown_name(self):
        """Test unresolvable names are rejected"""
        with pytest.raises(ValidationError, match="Unknown exception class"):
            RetryConfig(retry_on=["NoSuchError"])

    def test_retry_on_not_an_exception(self):
        """Test non-exception classes are rejected"""
        with pytest.raises(ValidationError, match="retry_on"):
            RetryConfig(retry_on=[int])

    def test_resolve_exception_class(self):
        """Test resolving a module attribute that is not an exception"""
        assert resolve_exception_class("KeyError") is KeyError
        with pytest.raises(ValueError, match="not an exception class"):
            resolve_exception_class("os.path")


class TestProbeConfigValidation:
    """Tests for ProbeConfig validation."""

    def test_defaults(self):
        """Test default probe configuration"""
        config = ProbeConfig()
        assert config.http_method == "GET"
        assert config.expected_status == []

    def test_invalid_method(self):
        """Test invalid HTTP method"""
        with pytest.raises(ValidationError, match="http_method"):
            ProbeConfig(http_method="PATCH")

    def test_connect_timeout_zero(self):
        """Test connect_timeout must be positive"""
        with pytest.raises(ValidationError, match="connect_timeout"):
            ProbeConfig(connect_timeout=0)


class TestAppConfigValidation:
    """Tests for AppConfig validation."""

    def test_valid_app_config(self):
        """Test valid application configuration"""
        config = AppConfig()
        assert config.retry.max_attempts == 5
        assert config.probes.connect_timeout == 1.0

    def test_unknown_field_rejected(self):
        """Test unknown sections are rejected"""
        with pytest.raises(ValidationError, match="extra"):
            AppConfig(unknown_field="value")

    def test_nested_validation(self):
        """Test nested validation works"""
        with pytest.raises(ValidationError, match="max_attempts"):
            AppConfig(retry={"max_attempts": 0})


class TestConfigManager:
    """Tests for ConfigManager loading."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for name in ("WAITFOR_ATTEMPTS", "WAITFOR_TIMEOUT", "WAITFOR_DELAY", "WAITFOR_VERBOSE", "WAITFOR_DEBUG"):
            monkeypatch.delenv(name, raising=False)

    def _write(self, path, data):
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        """Test defaults are used when no config file exists"""
        monkeypatch.chdir(tmp_path)
        manager = ConfigManager()
        assert manager.config_path is None
        assert manager.get_retry_config().max_attempts == 5

    def test_load_valid_config_from_file(self, tmp_path):
        """Test loading valid configuration from file"""
        config_file = self._write(
            tmp_path / ".waitfor.yml",
            {"retry": {"max_attempts": 3, "timeout": 2, "retry_on": ["ConnectionError"]}},
        )
        manager = ConfigManager(config_path=config_file)
        retry = manager.get_retry_config()
        assert retry.max_attempts == 3
        assert retry.timeout == 2.0
        assert retry.retry_on == (ConnectionError,)
        assert retry.initial_delay == 1.0

    def test_aliases_in_file(self, tmp_path):
        """Test attempts/delay/rescue spellings in the file"""
        config_file = self._write(
            tmp_path / ".waitfor.yml", {"retry": {"attempts": 7, "delay": 0.2, "rescue": "OSError"}}
        )
        retry = ConfigManager(config_path=config_file).get_retry_config()
        assert retry.max_attempts == 7
        assert retry.initial_delay == 0.2
        assert retry.retry_on == (OSError,)

    def test_finds_file_in_parent_directory(self, tmp_path, monkeypatch):
        """Test the config file is searched upwards"""
        self._write(tmp_path / ".waitfor.yml", {"retry": {"max_attempts": 2}})
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        manager = ConfigManager()
        assert manager.config_path.resolve() == (tmp_path / ".waitfor.yml").resolve()
        assert manager.get_retry_config().max_attempts == 2

    def test_invalid_file_values_raise(self, tmp_path):
        """Test invalid values fail with ConfigurationError"""
        config_file = self._write(tmp_path / ".waitfor.yml", {"retry": {"max_attempts": 0}})
        with pytest.raises(ConfigurationError, match="retry.max_attempts"):
            ConfigManager(config_path=config_file)

    def test_broken_yaml_falls_back_to_defaults(self, tmp_path):
        """Test unparsable YAML is ignored with defaults used"""
        config_file = tmp_path / ".waitfor.yml"
        config_file.write_text("retry: [unclosed", encoding="utf-8")
        manager = ConfigManager(config_path=config_file)
        assert manager.get_retry_config().max_attempts == 5

    def test_env_overrides(self, tmp_path, monkeypatch):
        """Test WAITFOR_* environment variables override the file"""
        config_file = self._write(tmp_path / ".waitfor.yml", {"retry": {"max_attempts": 3}})
        monkeypatch.setenv("WAITFOR_ATTEMPTS", "9")
        monkeypatch.setenv("WAITFOR_DELAY", "0.5")
        monkeypatch.setenv("WAITFOR_TIMEOUT", "none")
        monkeypatch.setenv("WAITFOR_VERBOSE", "false")
        retry = ConfigManager(config_path=config_file).get_retry_config()
        assert retry.max_attempts == 9
        assert retry.initial_delay == 0.5
        assert retry.timeout is None
        assert retry.verbose is False

    def test_env_non_integer_attempts(self, tmp_path, monkeypatch):
        """Test a non-integer WAITFOR_ATTEMPTS is rejected"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WAITFOR_ATTEMPTS", "2.5")
        with pytest.raises(ConfigurationError, match="max_attempts"):
            ConfigManager()

    def test_get_retry_config_overrides(self, tmp_path, monkeypatch):
        """Test CLI-style overrides on top of the loaded config"""
        monkeypatch.chdir(tmp_path)
        manager = ConfigManager()
        retry = manager.get_retry_config(max_attempts=2, timeout=None, initial_delay=0)
        assert retry.max_attempts == 2
        assert retry.timeout == 15.0
        assert retry.initial_delay == 0

    def test_get_retry_config_invalid_override(self, tmp_path, monkeypatch):
        """Test invalid overrides raise ConfigurationError"""
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError, match="max_attempts"):
            ConfigManager().get_retry_config(max_attempts=0)
