"""Flat INI text handling: structural check, parsing and serialization.

Only the two-level ``[section]`` / ``key=value`` shape is supported.
Comments and blank lines are skipped when parsing and are not written
back; a file that goes through a write loses them.
"""

from __future__ import annotations

import re

from inilock.errors import FormatInvalidError, InvalidNameError, InvalidValueError

Sections = dict[str, dict[str, str]]

COMMENT_PREFIXES = ("#", ";")
# Characters that force a value to be written in double quotes
QUOTE_TRIGGERS = ('"', ";", "#")

_SECTION_LINE = re.compile(r"^\[.*\]", re.MULTILINE)
_KEY_VALUE_LINE = re.compile(r"^[^#;].*=.*$", re.MULTILINE)
_SECTION_HEADER = re.compile(r"^\[(?P<name>[^\]]*)\]")


def check_structure(text: str, source: str = "<string>") -> None:
    """Reject text that has no section header or no ``key=value`` line."""
    if not _SECTION_LINE.search(text) or not _KEY_VALUE_LINE.search(text):
        raise FormatInvalidError(f"Invalid INI format: {source}")


def has_content(text: str) -> bool:
    """True when *text* has any line that is neither blank nor a comment."""
    return any(
        line.strip() and not line.strip().startswith(COMMENT_PREFIXES)
        for line in text.splitlines()
    )


def parse(text: str) -> Sections:
    """Parse INI text into ``{section: {key: value}}``.

    Keys outside any section, lines without ``=`` and empty names are
    ignored. A repeated key keeps its last value.
    """
    data: Sections = {}
    current: dict[str, str] | None = None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue

        header = _SECTION_HEADER.match(line)
        if header:
            name = header.group("name").strip()
            current = data.setdefault(name, {}) if name else None
            continue

        if current is None or "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip()
        if key:
            current[key] = unquote_value(value)

    return data


def unquote_value(raw: str) -> str:
    """Decode a raw value as written after ``=``.

    ``"..."`` values are unwrapped and ``""`` inside them becomes ``"``;
    anything after the closing quote is ignored. Unquoted values end at
    an inline ``;`` comment. Surrounding whitespace is trimmed.
    """
    raw = raw.strip()
    if raw.startswith('"'):
        chars = []
        i = 1
        while i < len(raw):
            ch = raw[i]
            if ch == '"':
                if raw[i + 1 : i + 2] == '"':
                    chars.append('"')
                    i += 2
                    continue
                return "".join(chars).strip()
            chars.append(ch)
            i += 1
        # Unterminated quote: keep the text as written
        return raw

    comment = raw.find(";")
    if comment >= 0:
        raw = raw[:comment]
    return raw.strip()


def quote_value(value: str) -> str:
    """Encode a value for writing, quoting it when it holds ``"``, ``;`` or ``#``."""
    if any(ch in value for ch in QUOTE_TRIGGERS):
        return '"' + value.replace('"', '""') + '"'
    return value


def serialize(data: Sections) -> str:
    """Render ``{section: {key: value}}`` as INI text."""
    lines: list[str] = []
    for section, entries in data.items():
        lines.append(f"[{section}]")
        for key, value in entries.items():
            lines.append(f"{key}={quote_value(value)}")
        lines.append("")
    return "\n".join(lines) + ("\n" if lines else "")


def validate_section_name(section: str) -> None:
    if not section or not section.strip():
        raise InvalidNameError("Section name cannot be empty")
    if section != section.strip() or any(ch in section for ch in "[]\r\n"):
        raise InvalidNameError(f"Invalid section name: {section!r}")


def validate_key_name(key: str) -> None:
    if not key or not key.strip():
        raise InvalidNameError("Key name cannot be empty")
    if (
        key != key.strip()
        or key.startswith(COMMENT_PREFIXES + ("[",))
        or any(ch in key for ch in "=\r\n")
    ):
        raise InvalidNameError(f"Invalid key name: {key!r}")


def validate_value(value: str) -> None:
    if "\n" in value or "\r" in value:
        raise InvalidValueError("Values cannot contain line breaks")
