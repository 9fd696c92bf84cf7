"""JSON bridge — single-level JSON view of INI sections.

Reads a key, a list of keys or a whole section and returns a flat dict (or
its JSON text); writes a flat mapping into a section. Absent keys and
sections produce empty results rather than errors, which is what API
callers feeding JSON to other programs expect.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path

from inilock.config import IniConfig
from inilock.convert import Scalar, convert_value, is_scalar, to_ini_value
from inilock.errors import InvalidNameError, InvalidValueError
from inilock.ini.mutator import LookupStatus
from inilock.manager import IniManager


class JsonBridge:
    """JSON-oriented access to INI files through ``IniManager``.

    Parameters
    ----------
    config : IniConfig | None
        Shared configuration; ``config.value_convert`` is the default for
        *value_convert*.
    value_convert : bool | None
        When True, values are converted to bool/int/float on read and
        booleans are written as ``1``/``0``.
    """

    def __init__(self, config: IniConfig | None = None, value_convert: bool | None = None) -> None:
        self.config = config or IniConfig()
        self.value_convert = self.config.value_convert if value_convert is None else value_convert

    def _manager(self, file: str | Path) -> IniManager:
        if not str(file):
            raise InvalidNameError("File path cannot be empty")
        return IniManager(file, self.config)

    def _out(self, value: str) -> Scalar:
        return convert_value(value) if self.value_convert else value

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read(
        self,
        file: str | Path,
        section: str,
        keys: str | Iterable[str] | None = None,
    ) -> dict[str, Scalar]:
        """Return ``{key: value}`` for one key, several keys or the whole section."""
        if not section:
            raise InvalidNameError("Section name cannot be empty")
        ini = self._manager(file)

        if isinstance(keys, str) and keys:
            keys = [keys]
        wanted = list(keys) if keys else []

        result = ini.lookup(section)
        if result.status != LookupStatus.FOUND:
            return {}
        entries = {k: v.strip() for k, v in result.value.items()}

        if not wanted:
            return {k: self._out(v) for k, v in entries.items()}
        return {k: self._out(entries[k]) for k in wanted if k in entries}

    def read_json(
        self,
        file: str | Path,
        section: str,
        keys: str | Iterable[str] | None = None,
    ) -> str:
        return json.dumps(self.read(file, section, keys))

    def section_exists(self, file: str | Path, section: str) -> bool:
        if not section:
            raise InvalidNameError("Section name cannot be empty")
        return self._manager(file).has_section(section)

    def sections_json(self, file: str | Path) -> str:
        return json.dumps(self._manager(file).sections())

    def keys_json(self, file: str | Path, section: str) -> str:
        return json.dumps(self._manager(file).keys(section))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write(self, file: str | Path, section: str, values: Mapping[str, Scalar]) -> None:
        """Write every ``key: value`` of a flat mapping into *section*.

        The whole mapping is checked before anything is written. Each key is
        written under its own lock acquisition; there is no all-or-nothing
        guarantee across keys.
        """
        if not section:
            raise InvalidNameError("Section name cannot be empty")
        if not isinstance(values, Mapping):
            raise InvalidValueError("Key-value data must be a mapping")
        if not values:
            return

        for key, value in values.items():
            if not key:
                raise InvalidNameError("Key cannot be empty")
            if not is_scalar(value):
                raise InvalidValueError(
                    f"JSON data must be a single-level object. "
                    f"Key '{key}' contains invalid type: {type(value).__name__}"
                )

        ini = self._manager(file)
        for key, value in values.items():
            ini.write(section, str(key), to_ini_value(value, self.value_convert))

    def write_json(self, file: str | Path, section: str, payload: str) -> None:
        try:
            values = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InvalidValueError(f"Invalid JSON: {exc}") from exc
        if not isinstance(values, dict):
            raise InvalidValueError("JSON data must be an object")
        self.write(file, section, values)

    def delete(self, file: str | Path, section: str, key: str) -> bool:
        return self._manager(file).delete(section, key)
