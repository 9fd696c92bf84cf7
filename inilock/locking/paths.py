"""Lock file path derivation."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path


def resolve_target(target: str | Path) -> Path:
    """Return the absolute, symlink-free path of a target file.

    The target does not need to exist yet; missing trailing components
    are kept as given.
    """
    return Path(os.path.realpath(os.path.abspath(os.fspath(target))))


def path_hash(target: str | Path) -> str:
    """MD5 hex digest of the resolved absolute target path."""
    return hashlib.md5(str(resolve_target(target)).encode("utf-8")).hexdigest()


def lock_path_for(
    target: str | Path,
    fallback_dir: str | Path = "/tmp",
    prefix: str = "ini_manager",
) -> Path:
    """Return the lock file path for *target*.

    ``<dir>/.<basename>.lock`` when the target's directory is writable,
    otherwise ``<fallback_dir>/<prefix>.<md5 of resolved path>.lock``.
    Both forms depend only on the resolved path, so relative paths and
    symlinks that reach the same file share one lock.
    """
    resolved = resolve_target(target)
    directory = resolved.parent
    if os.access(directory, os.W_OK):
        return directory / f".{resolved.name}.lock"
    return Path(fallback_dir) / f"{prefix}.{path_hash(resolved)}.lock"
