import json
import logging

import pytest

from xbee_io.config import ConfigManager, SerialSettings, FramerSettings, AppSettings, configure_logging
from xbee_io.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(isolated_env):
    # keep ~/.xbee_io and the caller's environment out of the tests
    return isolated_env


def test_defaults():
    cfg = ConfigManager()
    assert cfg.serial_settings == SerialSettings()
    assert cfg.framer_settings.verify_checksum is False
    assert cfg.app_settings.log_level == "INFO"
    assert cfg.validate() == []


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("XBEE_PORT", "/dev/ttyAMA0")
    monkeypatch.setenv("XBEE_BAUDRATE", "57600")
    monkeypatch.setenv("XBEE_VERIFY_CHECKSUM", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    cfg = ConfigManager()
    assert cfg.serial_settings.port == "/dev/ttyAMA0"
    assert cfg.serial_settings.baudrate == 57600
    assert cfg.framer_settings.verify_checksum is True
    assert cfg.app_settings.log_level == "DEBUG"


def test_invalid_environment_value_keeps_default(monkeypatch):
    monkeypatch.setenv("XBEE_BAUDRATE", "fast")
    cfg = ConfigManager()
    assert cfg.serial_settings.baudrate == 9600


def test_file_overrides_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("XBEE_PORT", "/dev/ttyAMA0")
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "serial_settings": {"port": "COM4", "baudrate": 115200, "timeout": 0.5},
        "framer_settings": {"verify_checksum": True},
        "app_settings": {"log_level": "warning"},
    }))
    cfg = ConfigManager(str(path))
    assert cfg.serial_settings.port == "COM4"
    assert cfg.serial_settings.baudrate == 115200
    assert cfg.serial_settings.timeout == 0.5
    assert cfg.framer_settings.verify_checksum is True
    assert cfg.app_settings.log_level == "WARNING"
    assert cfg.config_file == str(path)


def test_broken_file_is_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    cfg = ConfigManager(str(path))
    assert cfg.serial_settings == SerialSettings()


def test_save_and_reload(tmp_path):
    cfg = ConfigManager()
    cfg.serial_settings.port = "/dev/ttyS1"
    cfg.framer_settings.verify_checksum = True
    path = tmp_path / "sub" / "saved.json"
    assert cfg.save_to_file(str(path))
    reloaded = ConfigManager(str(path))
    assert reloaded.serial_settings.port == "/dev/ttyS1"
    assert reloaded.framer_settings.verify_checksum is True


def test_save_defaults_to_home(tmp_path):
    cfg = ConfigManager()
    assert cfg.save_to_file()
    assert (tmp_path / ".xbee_io" / "config.json").exists()
    assert ConfigManager().config_file == str(tmp_path / ".xbee_io" / "config.json")


def test_validation_errors():
    assert SerialSettings(baudrate=1234).validate()
    assert SerialSettings(port="").validate()
    assert SerialSettings(timeout=-1).validate()
    assert FramerSettings(verify_checksum="yes").validate()
    assert AppSettings(log_level="LOUD").validate()


def test_strict_mode_raises(monkeypatch):
    monkeypatch.setenv("XBEE_BAUDRATE", "1234")
    with pytest.raises(ConfigurationError) as exc:
        ConfigManager(strict=True)
    assert exc.value.errors


def test_configure_logging():
    configure_logging("debug")
    assert logging.getLogger().level == logging.DEBUG
    configure_logging("WARNING")
    assert logging.getLogger().level == logging.WARNING


def test_source_defaults_to_sim():
    assert ConfigManager().app_settings.source == "sim"


def test_source_from_environment_and_file(monkeypatch, tmp_path):
    monkeypatch.setenv("XBEE_SOURCE", "Serial")
    assert ConfigManager().app_settings.source == "serial"
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"app_settings": {"source": "sim"}}))
    assert ConfigManager(str(path)).app_settings.source == "sim"


def test_unknown_source_is_invalid():
    assert AppSettings(source="tcp").validate()
