"""Optional value conversion between INI strings and Python scalars.

Storage always deals in strings; these pure functions are applied at the
boundary (JSON bridge, CLI) when a caller asks for typed values.
"""

from __future__ import annotations

import re

Scalar = str | int | float | bool | None

TRUE_WORDS = frozenset({"true", "1", "on", "yes"})
FALSE_WORDS = frozenset({"false", "0", "off", "no"})

_INT = re.compile(r"^[+-]?\d+$")
_FLOAT = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def convert_value(raw: str | None) -> Scalar:
    """Turn a stored string into bool, int, float, None or the string itself.

    ``"1"`` and ``"0"`` count as booleans, mirroring how booleans are
    written by :func:`to_ini_value`.
    """
    if raw is None or raw == "":
        return None

    lowered = raw.strip().lower()
    if lowered in TRUE_WORDS:
        return True
    if lowered in FALSE_WORDS:
        return False

    text = raw.strip()
    if _INT.match(text):
        return int(text)
    if _FLOAT.match(text):
        return float(text)
    return raw


def to_ini_value(value: Scalar, convert: bool = False) -> str:
    """Render a scalar for storage; booleans become ``1``/``0`` when converting."""
    if value is None:
        return ""
    if convert and isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def is_scalar(value: object) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))
