"""Tests for the JSON bridge."""

import json

import pytest

from inilock.bridge import JsonBridge
from inilock.errors import FormatInvalidError, InvalidNameError, InvalidValueError, SectionNotFoundError


def _file(tmp_path):
    path = tmp_path / "config.ini"
    JsonBridge().write(path, "database", {"host": "localhost", "port": 3306, "name": "mydb"})
    return path


def test_read_whole_section_as_strings(tmp_path):
    path = _file(tmp_path)
    assert JsonBridge().read(path, "database") == {
        "host": "localhost",
        "port": "3306",
        "name": "mydb",
    }


def test_read_single_key(tmp_path):
    path = _file(tmp_path)
    assert JsonBridge().read_json(path, "database", "host") == '{"host": "localhost"}'


def test_read_selected_keys_skips_missing(tmp_path):
    path = _file(tmp_path)
    result = JsonBridge().read(path, "database", ["host", "missing", "port"])
    assert result == {"host": "localhost", "port": "3306"}


def test_missing_key_or_section_gives_empty_object(tmp_path):
    path = _file(tmp_path)
    bridge = JsonBridge()
    assert bridge.read(path, "database", "missing") == {}
    assert bridge.read_json(path, "cache") == "{}"


def test_conversion_round_trip(tmp_path):
    path = tmp_path / "typed.ini"
    bridge = JsonBridge(value_convert=True)
    bridge.write(path, "db", {"port": 3306, "ssl": True, "timeout": 30.5, "note": None})

    assert path.read_text() == "[db]\nport=3306\nssl=1\ntimeout=30.5\nnote=\n\n"
    assert bridge.read(path, "db") == {"port": 3306, "ssl": True, "timeout": 30.5, "note": None}


def test_conversion_default_from_config(tmp_path):
    from inilock.config import IniConfig

    path = _file(tmp_path)
    assert JsonBridge(IniConfig(value_convert=True)).read(path, "database", "port") == {"port": 3306}


def test_nested_values_rejected_before_writing(tmp_path):
    path = tmp_path / "config.ini"
    with pytest.raises(InvalidValueError, match="nested"):
        JsonBridge().write(path, "s", {"ok": "1", "nested": {"a": 1}})
    assert not path.exists()


def test_empty_mapping_is_noop(tmp_path):
    path = tmp_path / "config.ini"
    JsonBridge().write(path, "s", {})
    assert not path.exists()


def test_empty_section_rejected(tmp_path):
    with pytest.raises(InvalidNameError):
        JsonBridge().read(tmp_path / "x.ini", "")


def test_write_json_payload(tmp_path):
    path = tmp_path / "config.ini"
    bridge = JsonBridge()
    bridge.write_json(path, "app", '{"debug": "yes", "level": 3}')
    assert bridge.read(path, "app") == {"debug": "yes", "level": "3"}

    with pytest.raises(InvalidValueError):
        bridge.write_json(path, "app", "[1, 2]")
    with pytest.raises(InvalidValueError):
        bridge.write_json(path, "app", "{not json")


def test_section_listing_helpers(tmp_path):
    path = _file(tmp_path)
    bridge = JsonBridge()
    bridge.write(path, "cache", {"ttl": 60})

    assert bridge.section_exists(path, "cache")
    assert not bridge.section_exists(path, "queue")
    assert set(json.loads(bridge.sections_json(path))) == {"database", "cache"}
    assert set(json.loads(bridge.keys_json(path, "database"))) == {"host", "port", "name"}
    with pytest.raises(SectionNotFoundError):
        bridge.keys_json(path, "queue")


def test_delete(tmp_path):
    path = _file(tmp_path)
    bridge = JsonBridge()
    assert bridge.delete(path, "database", "name") is True
    assert bridge.delete(path, "database", "name") is False


def test_invalid_file_propagates(tmp_path):
    path = tmp_path / "bad.ini"
    path.write_text("no sections here\n")
    with pytest.raises(FormatInvalidError):
        JsonBridge().read(path, "s")
