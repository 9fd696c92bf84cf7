"""Exception taxonomy for inilock.

Every error carries the process exit code the CLI uses for its bucket, so
calling scripts can branch on the outcome without parsing messages.
"""


class IniLockError(Exception):
    """Base exception for all inilock errors."""

    exit_code = 1


# ── Lock errors ──────────────────────────────────────────────────────


class LockError(IniLockError):
    """The lock for a target file could not be obtained."""

    exit_code = 5


class LockPathUnwritableError(LockError):
    """The directory that must hold the lock file is not writable."""


class LockOpenError(LockError):
    """The lock file exists but cannot be opened (not contention)."""


class LockTimeoutError(LockError):
    """Another process kept the lock for every retry attempt."""


# ── Format errors ────────────────────────────────────────────────────


class FormatError(IniLockError):
    """The target file cannot be used as an INI file."""

    exit_code = 4


class FileMissingError(FormatError):
    """The target file does not exist."""


class FileUnreadableError(FormatError):
    """The target file exists but cannot be read."""


class FormatInvalidError(FormatError):
    """The target file fails the structural INI check."""


# ── Data errors ──────────────────────────────────────────────────────


class DataError(IniLockError):
    """A section, key or value is absent or unusable."""

    exit_code = 3


class SectionNotFoundError(DataError):
    """The requested section does not exist."""

    def __init__(self, section: str):
        super().__init__(f"Section not found: [{section}]")
        self.section = section


class KeyNotFoundError(DataError):
    """The section exists but does not contain the requested key."""

    def __init__(self, section: str, key: str):
        super().__init__(f"Key not found: [{section}] {key}")
        self.section = section
        self.key = key


class InvalidNameError(DataError):
    """A section or key name is empty or cannot be serialized."""


class InvalidValueError(DataError):
    """A value cannot be stored in a flat INI file."""


# ── Write errors ─────────────────────────────────────────────────────


class WriteError(IniLockError):
    """The updated content could not be put in place."""

    exit_code = 6


class TempFileCreateError(WriteError):
    pass


class SerializeError(WriteError):
    pass


class RenameError(WriteError):
    pass


class PermissionCopyError(WriteError):
    pass


# ── Configuration ────────────────────────────────────────────────────


class ConfigError(IniLockError):
    """Configuration file or environment values are unusable."""

    exit_code = 7
