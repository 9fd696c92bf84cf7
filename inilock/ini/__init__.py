"""INI file content: text format and the atomic mutator."""

from inilock.ini.mutator import AtomicMutator, Lookup, LookupStatus

__all__ = [
    "AtomicMutator",
    "Lookup",
    "LookupStatus",
]
