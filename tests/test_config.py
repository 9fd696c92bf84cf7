"""Tests for configuration loading."""

import pytest
import yaml

from inilock.config import IniConfig, load_config
from inilock.errors import ConfigError


def test_defaults():
    config = IniConfig()
    assert config.stale_after == 120.0
    assert config.retries == 10
    assert config.retry_wait == 0.1
    assert config.max_wait == pytest.approx(1.0)
    assert config.fallback_lock_dir == "/tmp"
    assert config.lock_prefix == "ini_manager"


def test_load_yaml(tmp_path):
    path = tmp_path / "inilock.yaml"
    with open(path, "w") as f:
        yaml.dump({"stale_after": 30, "retries": 20, "new_file_mode": "0600"}, f)

    config = load_config(path)
    assert config.stale_after == 30.0
    assert config.retries == 20
    assert config.new_file_mode == 0o600
    assert config.retry_wait == 0.1


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == IniConfig()


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("stale_afterr: 10\n")
    with pytest.raises(ConfigError, match="stale_afterr"):
        load_config(path)


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError):
        load_config(path)


def test_missing_file_rejected(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "overrides",
    [{"retries": 0}, {"retry_wait": -1}, {"stale_after": 0}, {"retries": "many"}],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ConfigError):
        IniConfig().with_overrides(**overrides)


def test_from_env():
    config = IniConfig.from_env(
        {"INILOCK_STALE_AFTER": "45", "INILOCK_RETRIES": "3", "INILOCK_LOCK_DIR": "/var/lock"}
    )
    assert config.stale_after == 45.0
    assert config.retries == 3
    assert config.fallback_lock_dir == "/var/lock"


def test_file_layers_over_env(tmp_path):
    path = tmp_path / "inilock.yaml"
    path.write_text("retries: 7\n")
    base = IniConfig.from_env({"INILOCK_RETRIES": "3", "INILOCK_RETRY_WAIT": "0.5"})

    config = load_config(path, base=base)
    assert config.retries == 7
    assert config.retry_wait == 0.5


def test_none_overrides_ignored():
    assert IniConfig().with_overrides(stale_after=None) == IniConfig()
