"""IniManager — the locked operation surface for one INI file.

Every public method acquires the file's lock, does its work through the
atomic mutator and releases the lock on every exit path.

Usage:
    >>> ini = IniManager("config.ini")
    >>> ini.write("database", "host", "localhost")
    >>> ini.read("database", "host")
    'localhost'
    >>> ini.delete("database", "host")
    True
"""

from __future__ import annotations

from pathlib import Path

from inilock.config import IniConfig
from inilock.errors import KeyNotFoundError, SectionNotFoundError
from inilock.ini.format import Sections
from inilock.ini.mutator import AtomicMutator, Lookup, LookupStatus
from inilock.locking.manager import LockManager


class IniManager:
    """Locked read/write/delete/list operations on a single INI file."""

    def __init__(
        self,
        path: str | Path,
        config: IniConfig | None = None,
        lock_manager: LockManager | None = None,
    ) -> None:
        if not str(path):
            raise ValueError("INI file path cannot be empty")
        self.path = Path(path)
        self.config = config or IniConfig()
        self.locks = lock_manager or LockManager(self.config)
        self._mutator = AtomicMutator(self.path, self.config)

    @property
    def lock_path(self) -> Path:
        return self.locks.lock_path(self.path)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def lookup(self, section: str, key: str | None = None) -> Lookup:
        """Non-raising lookup of a key, or of a whole section when *key* is None."""
        with self.locks.hold(self.path):
            return self._mutator.lookup(section, key)

    def read(self, section: str, key: str) -> str:
        """Return the trimmed value of ``section.key``.

        Raises SectionNotFoundError or KeyNotFoundError when absent.
        """
        return _unwrap(self.lookup(section, key))

    def read_section(self, section: str) -> dict[str, str]:
        return _unwrap(self.lookup(section))

    def read_all(self) -> Sections:
        with self.locks.hold(self.path):
            return self._mutator.read_all()

    def sections(self) -> list[str]:
        with self.locks.hold(self.path):
            return self._mutator.list_sections()

    def keys(self, section: str) -> list[str]:
        with self.locks.hold(self.path):
            return self._mutator.list_keys(section)

    def has_section(self, section: str) -> bool:
        return section in self.sections()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write(self, section: str, key: str, value: str) -> None:
        """Insert or overwrite ``section.key``; creates the file if absent."""
        with self.locks.hold(self.path):
            self._mutator.write_value(section, key, value)

    def delete(self, section: str, key: str) -> bool:
        """Delete ``section.key``. Returns whether the key existed."""
        with self.locks.hold(self.path):
            return self._mutator.delete_key(section, key)


def _unwrap(result: Lookup):
    if result.status == LookupStatus.SECTION_NOT_FOUND:
        raise SectionNotFoundError(result.section)
    if result.status == LookupStatus.KEY_NOT_FOUND:
        raise KeyNotFoundError(result.section, result.key or "")
    return result.value
