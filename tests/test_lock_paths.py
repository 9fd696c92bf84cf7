"""Tests for lock file path derivation."""

import hashlib
import os
from pathlib import Path

from inilock.locking.paths import lock_path_for, resolve_target


def test_lock_is_hidden_sibling_in_writable_dir(tmp_path):
    target = tmp_path / "settings.ini"
    assert lock_path_for(target) == tmp_path / ".settings.ini.lock"


def test_target_does_not_need_to_exist(tmp_path):
    target = tmp_path / "not-yet.ini"
    assert not target.exists()
    assert lock_path_for(target).name == ".not-yet.ini.lock"


def test_relative_and_absolute_paths_share_lock(tmp_path, monkeypatch):
    target = tmp_path / "conf" / "app.ini"
    target.parent.mkdir()
    target.write_text("[a]\nb=c\n")

    absolute = lock_path_for(target)

    monkeypatch.chdir(tmp_path)
    assert lock_path_for("conf/app.ini") == absolute

    monkeypatch.chdir(target.parent)
    assert lock_path_for("app.ini") == absolute
    assert lock_path_for("../conf/./app.ini") == absolute


def test_symlink_shares_lock_with_its_target(tmp_path):
    real_dir = tmp_path / "real"
    real_dir.mkdir()
    target = real_dir / "app.ini"
    target.write_text("[a]\nb=c\n")

    link_dir = tmp_path / "links"
    link_dir.mkdir()
    link = link_dir / "alias.ini"
    link.symlink_to(target)

    assert lock_path_for(link) == lock_path_for(target)
    assert lock_path_for(link) == real_dir / ".app.ini.lock"


def test_unwritable_dir_falls_back_to_hashed_lock(tmp_path, monkeypatch):
    target = tmp_path / "app.ini"
    monkeypatch.setattr(os, "access", lambda *args, **kwargs: False)

    expected_hash = hashlib.md5(str(resolve_target(target)).encode()).hexdigest()
    assert lock_path_for(target) == Path(f"/tmp/ini_manager.{expected_hash}.lock")


def test_hashed_lock_independent_of_working_dir(tmp_path, monkeypatch):
    target = tmp_path / "app.ini"
    monkeypatch.setattr(os, "access", lambda *args, **kwargs: False)

    first = lock_path_for(target, fallback_dir=tmp_path / "locks")
    monkeypatch.chdir(tmp_path)
    second = lock_path_for("app.ini", fallback_dir=tmp_path / "locks")

    assert first == second
    assert first.parent == tmp_path / "locks"


def test_different_targets_get_different_hashed_locks(tmp_path, monkeypatch):
    monkeypatch.setattr(os, "access", lambda *args, **kwargs: False)

    one = lock_path_for(tmp_path / "one.ini")
    two = lock_path_for(tmp_path / "two.ini")
    assert one != two


def test_custom_prefix(tmp_path, monkeypatch):
    monkeypatch.setattr(os, "access", lambda *args, **kwargs: False)

    path = lock_path_for(tmp_path / "app.ini", fallback_dir=tmp_path, prefix="shared")
    assert path.name.startswith("shared.")
    assert path.name.endswith(".lock")
