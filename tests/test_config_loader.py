import pytest

from aiassist.config_loader import ConfigLoader, SessionSettings
from aiassist.errors import ConfigError

_CONFIG = """
language: zh
default_model: first/m1
providers:
  - name: first
    base_url: https://one.example/v1/
    api_key: k1
    models:
      - m1
      - name: m2
        enabled: false
      - name: m3
  - name: second
    base_url: https://two.example/v1
    api_key: k2
    enabled: false
    models: [x]
  - name: third
    base_url: https://three.example/v1
    api_key: k3
    models: [t1]
blacklist: ["rm *", reboot]
session:
  max_depth: 3
  command_timeout_seconds: 15
"""


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_entries_follow_file_order(tmp_path):
    config = ConfigLoader(_write(tmp_path, _CONFIG)).load()

    assert [e.key for e in config.enabled_entries()] == ["first/m1", "first/m3", "third/t1"]


def test_trailing_slash_removed_from_base_url(tmp_path):
    config = ConfigLoader(_write(tmp_path, _CONFIG)).load()

    assert config.enabled_entries()[0].base_url == "https://one.example/v1"


def test_scalar_fields(tmp_path):
    config = ConfigLoader(_write(tmp_path, _CONFIG)).load()

    assert config.language == "zh"
    assert config.default_model == "first/m1"
    assert config.blacklist == ("rm *", "reboot")


def test_session_settings_with_defaults(tmp_path):
    settings = ConfigLoader(_write(tmp_path, _CONFIG)).load().session

    assert settings.max_depth == 3
    assert settings.command_timeout_seconds == 15.0
    assert settings.output_max_chars == SessionSettings().output_max_chars
    assert settings.request_timeout_seconds == 120.0


def test_unknown_language_defaults_to_english(tmp_path):
    config = ConfigLoader(_write(tmp_path, "language: klingon\n")).load()

    assert config.language == "en"
    assert config.enabled_entries() == []


def test_env_var_selects_file(tmp_path, monkeypatch):
    path = _write(tmp_path, _CONFIG)
    monkeypatch.setenv("AIASSIST_CONFIG", str(path))

    assert ConfigLoader().config_file == path


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        ConfigLoader(tmp_path / "absent.yaml").load()


def test_providers_must_be_a_list(tmp_path):
    path = _write(tmp_path, "providers:\n  first:\n    base_url: x\n")

    with pytest.raises(ConfigError, match="must be a list"):
        ConfigLoader(path).load()


def test_provider_needs_name_and_url(tmp_path):
    path = _write(tmp_path, "providers:\n  - name: nourl\n")

    with pytest.raises(ConfigError):
        ConfigLoader(path).load()


def test_invalid_session_value(tmp_path):
    path = _write(tmp_path, "session:\n  max_depth: lots\n")

    with pytest.raises(ConfigError, match="session"):
        ConfigLoader(path).load()
