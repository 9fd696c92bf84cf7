"""Atomic mutator: read-modify-write of an INI file held under its lock.

Callers must hold the target's lock (``LockManager.hold``) for the whole
call; the mutator does not check this itself. Writes go to a temporary
file in the target's directory which is then renamed over the target, so
readers see either the old or the new file and never a partial one.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from inilock.config import IniConfig
from inilock.errors import (
    FileMissingError,
    FileUnreadableError,
    PermissionCopyError,
    RenameError,
    SectionNotFoundError,
    SerializeError,
    TempFileCreateError,
)
from inilock.ini.format import (
    Sections,
    check_structure,
    has_content,
    parse,
    serialize,
    validate_key_name,
    validate_section_name,
    validate_value,
)
from inilock.locking.paths import resolve_target

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".ini_temp_"


class LookupStatus(Enum):
    """Outcome of looking up a section or key."""

    FOUND = "found"
    SECTION_NOT_FOUND = "section_not_found"
    KEY_NOT_FOUND = "key_not_found"


@dataclass
class Lookup:
    """Result of a lookup; ``value`` is a string for a key, a dict for a section."""

    status: LookupStatus
    section: str
    key: str | None = None
    value: str | dict[str, str] | None = None

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND


class AtomicMutator:
    """Structured access to one INI file.

    The path is resolved up front: writes through a symlink replace the file
    it points to and leave the link in place.
    """

    def __init__(self, path: str | Path, config: IniConfig | None = None) -> None:
        self.path = resolve_target(path)
        self.config = config or IniConfig()

    # ------------------------------------------------------------------
    # Read paths
    # ------------------------------------------------------------------

    def load(self) -> Sections:
        """Validate and parse the file.

        Raises:
            FileMissingError: The file does not exist.
            FileUnreadableError: The file cannot be read.
            FormatInvalidError: No section header or no ``key=value`` line.
        """
        text = self._read_text()
        check_structure(text, source=str(self.path))
        return parse(text)

    def _read_text(self) -> str:
        if not self.path.exists():
            raise FileMissingError(f"File missing: {self.path}")
        if not self.path.is_file() or not os.access(self.path, os.R_OK):
            raise FileUnreadableError(f"File unreadable: {self.path}")
        try:
            return self.path.read_text(encoding=self.config.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise FileUnreadableError(f"Cannot read {self.path}: {exc}") from exc

    def _load_for_write(self) -> Sections:
        # A missing file, or one emptied by deleting its last key, is an
        # empty starting point rather than an invalid file
        if not self.path.exists():
            return {}
        text = self._read_text()
        if not has_content(text):
            return {}
        check_structure(text, source=str(self.path))
        return parse(text)

    def lookup(self, section: str, key: str | None = None) -> Lookup:
        """Find a key (trimmed value) or, with ``key=None``, a whole section."""
        data = self.load()
        entries = data.get(section)
        if entries is None:
            return Lookup(LookupStatus.SECTION_NOT_FOUND, section, key)
        if key is None:
            return Lookup(LookupStatus.FOUND, section, None, dict(entries))
        if key not in entries:
            return Lookup(LookupStatus.KEY_NOT_FOUND, section, key)
        return Lookup(LookupStatus.FOUND, section, key, entries[key].strip())

    def read_all(self) -> Sections:
        return self.load()

    def list_sections(self) -> list[str]:
        return list(self.load())

    def list_keys(self, section: str) -> list[str]:
        data = self.load()
        if section not in data:
            raise SectionNotFoundError(section)
        return list(data[section])

    # ------------------------------------------------------------------
    # Write paths
    # ------------------------------------------------------------------

    def write_value(self, section: str, key: str, value: str) -> None:
        """Set ``section[key] = value``, creating the file and section as needed."""
        validate_section_name(section)
        validate_key_name(key)
        validate_value(value)

        data = self._load_for_write()
        data.setdefault(section, {})[key] = value
        self.replace(data)

    def delete_key(self, section: str, key: str) -> bool:
        """Remove a key; drop its section when it becomes empty.

        Returns False when the key did not exist (the file is left untouched).
        """
        validate_section_name(section)
        validate_key_name(key)

        data = self.load()
        entries = data.get(section)
        if entries is None or key not in entries:
            return False

        del entries[key]
        if not entries:
            del data[section]
        self.replace(data)
        return True

    def replace(self, data: Sections) -> None:
        """Serialize *data* and atomically replace the file with it."""
        try:
            text = serialize(data)
        except (TypeError, AttributeError) as exc:
            raise SerializeError(f"Cannot serialize INI data: {exc}") from exc
        atomic_replace(self.path, text, self.config)


def atomic_replace(path: Path, text: str, config: IniConfig) -> None:
    """Write *text* to a same-directory temp file and rename it over *path*.

    The original file's permission bits are copied (fatal on failure) and
    its owner and group are copied when allowed (failure tolerated). A new
    file gets ``config.new_file_mode``. The temp file never outlives a
    failure.
    """
    try:
        original = os.stat(path)
    except FileNotFoundError:
        original = None

    try:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=TEMP_PREFIX)
    except OSError as exc:
        raise TempFileCreateError(f"Cannot create temporary file in {path.parent}: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        try:
            with os.fdopen(fd, "w", encoding=config.encoding) as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
        except (OSError, UnicodeEncodeError) as exc:
            raise SerializeError(f"Failed to write temporary file {tmp_path}: {exc}") from exc

        _copy_metadata(original, tmp_path, config)

        try:
            os.replace(tmp_path, path)
        except OSError as exc:
            raise RenameError(f"Failed to replace {path}: {exc}") from exc
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.debug("Replaced %s (%d bytes)", path, len(text))


def _copy_metadata(original: os.stat_result | None, tmp_path: Path, config: IniConfig) -> None:
    mode = stat.S_IMODE(original.st_mode) if original else config.new_file_mode
    try:
        os.chmod(tmp_path, mode)
    except OSError as exc:
        raise PermissionCopyError(f"Cannot set mode {mode:o} on {tmp_path}: {exc}") from exc

    if original is None:
        return
    try:
        os.chown(tmp_path, original.st_uid, original.st_gid)
    except OSError as exc:
        # Usually needs privileges the caller does not have
        logger.debug("Could not copy ownership to %s: %s", tmp_path, exc)
