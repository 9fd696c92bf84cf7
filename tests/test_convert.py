"""Tests for boundary value conversion."""

import pytest

from inilock.convert import convert_value, is_scalar, to_ini_value


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("true", True),
        ("Yes", True),
        ("on", True),
        ("1", True),
        ("false", False),
        ("OFF", False),
        ("no", False),
        ("0", False),
        ("3306", 3306),
        ("-12", -12),
        ("30.5", 30.5),
        ("1e3", 1000.0),
        ("localhost", "localhost"),
        ("1.2.3", "1.2.3"),
        ("", None),
        (None, None),
    ],
)
def test_convert_value(raw, expected):
    result = convert_value(raw)
    assert result == expected
    assert type(result) is type(expected)


def test_to_ini_value():
    assert to_ini_value(None) == ""
    assert to_ini_value(3306) == "3306"
    assert to_ini_value(30.5) == "30.5"
    assert to_ini_value(True) == "True"
    assert to_ini_value(True, convert=True) == "1"
    assert to_ini_value(False, convert=True) == "0"
    assert to_ini_value("text", convert=True) == "text"


def test_is_scalar():
    assert is_scalar("a")
    assert is_scalar(1)
    assert is_scalar(None)
    assert not is_scalar([1])
    assert not is_scalar({"a": 1})
