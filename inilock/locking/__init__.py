"""Cross-process advisory locking tied to a target file path.

The lock file name is derived from the target path alone, so any process
on the host (whatever language it is written in) that follows the same
rule serializes against every other one.
"""

from inilock.locking.manager import LockHandle, LockManager
from inilock.locking.paths import lock_path_for

__all__ = [
    "LockHandle",
    "LockManager",
    "lock_path_for",
]
