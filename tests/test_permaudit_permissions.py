# SPDX-License-Identifier: MIT
"""Tests for permaudit.audit.permissions — traversal engine and custom audits."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from permaudit.audit.base import Importance, PermissionRule, Severity, Status
from permaudit.audit.permissions import audit_rules, check_permissions, custom_audit

_is_root = os.geteuid() == 0
skip_if_root = pytest.mark.skipif(_is_root, reason="root bypasses permission checks")


def _file(path: Path, mode: int) -> Path:
    path.write_text("x")
    os.chmod(path, mode)
    return path


def _rule(path: Path, mode: int, recursive: bool = True) -> PermissionRule:
    return PermissionRule(path=path, expected_mode=mode, recursive=recursive, importance=Importance.HIGH)


class TestSingleFile:
    def test_exact_match(self, tmp_path: Path) -> None:
        f = _file(tmp_path / "f", 0o644)
        [result] = check_permissions(_rule(f, 0o644, recursive=False), set())
        assert result.status == Status.PASS
        assert result.severity == Severity.NONE
        assert result.found_mode == 0o644
        assert result.error is None

    def test_stricter(self, tmp_path: Path) -> None:
        f = _file(tmp_path / "f", 0o600)
        [result] = check_permissions(_rule(f, 0o644, recursive=False), set())
        assert result.status == Status.STRICT
        assert result.severity == Severity.INFO

    def test_world_writable(self, tmp_path: Path) -> None:
        f = _file(tmp_path / "f", 0o666)
        [result] = check_permissions(_rule(f, 0o644, recursive=False), set())
        assert result.status == Status.FAIL
        assert result.severity == Severity.CRITICAL

    def test_missing_file_yields_nothing(self, tmp_path: Path) -> None:
        assert check_permissions(_rule(tmp_path / "gone", 0o644), set()) == []


class TestDirectoryWalk:
    def test_directory_itself_not_reported(self, tmp_path: Path) -> None:
        _file(tmp_path / "a", 0o644)
        _file(tmp_path / "b", 0o640)
        results = check_permissions(_rule(tmp_path, 0o644), set())
        assert [r.path.name for r in results] == ["a", "b"]
        assert [r.status for r in results] == [Status.PASS, Status.STRICT]

    def test_children_inherit_rule(self, tmp_path: Path) -> None:
        (tmp_path / "sub").mkdir()
        _file(tmp_path / "sub" / "deep", 0o600)
        [result] = check_permissions(_rule(tmp_path, 0o600), set())
        assert result.path == tmp_path / "sub" / "deep"
        assert result.expected_mode == 0o600
        assert result.importance == Importance.HIGH

    def test_non_recursive_directory_yields_nothing(self, tmp_path: Path) -> None:
        _file(tmp_path / "a", 0o777)
        assert check_permissions(_rule(tmp_path, 0o755, recursive=False), set()) == []

    def test_symlink_delegated(self, tmp_path: Path) -> None:
        _file(tmp_path / "real", 0o644)
        os.symlink("real", tmp_path / "zlink")
        results = check_permissions(_rule(tmp_path, 0o644), set())
        link = next(r for r in results if r.path.name == "zlink")
        assert link.status == Status.PASS
        assert link.severity == Severity.NONE
        assert link.found_mode == 0

    def test_dangling_symlink_is_strict_info(self, tmp_path: Path) -> None:
        os.symlink("nowhere", tmp_path / "dangling")
        [result] = check_permissions(_rule(tmp_path, 0o644), set())
        assert result.status == Status.STRICT
        assert result.severity == Severity.INFO
        assert result.error == "Symlink not found"

    def test_symlink_cycle_terminates(self, tmp_path: Path) -> None:
        (tmp_path / "sub").mkdir()
        _file(tmp_path / "sub" / "f", 0o644)
        os.symlink(tmp_path, tmp_path / "sub" / "up")
        results = check_permissions(_rule(tmp_path, 0o644), set())
        assert sorted(r.path.name for r in results) == ["f", "up"]

    def test_symlinked_directory_not_descended(self, tmp_path: Path) -> None:
        other = tmp_path / "other"
        other.mkdir()
        _file(other / "hidden", 0o777)
        root = tmp_path / "root"
        root.mkdir()
        os.symlink(other, root / "to-other")
        results = check_permissions(_rule(root, 0o644), set())
        assert [r.path.name for r in results] == ["to-other"]

    @skip_if_root
    def test_unreadable_directory(self, tmp_path: Path) -> None:
        locked = tmp_path / "locked"
        locked.mkdir()
        os.chmod(locked, 0o000)
        try:
            results = check_permissions(_rule(tmp_path, 0o644), set())
        finally:
            os.chmod(locked, 0o755)
        [result] = results
        assert result.path == locked
        assert result.severity == Severity.CRITICAL
        assert result.status == Status.FAIL
        assert result.error is not None
        assert result.error.startswith("Failed to read directory")


class TestAuditRules:
    def test_shared_visited_dedups_directory(self, tmp_path: Path) -> None:
        _file(tmp_path / "a", 0o644)
        rules = [_rule(tmp_path, 0o644), _rule(tmp_path, 0o600)]
        results = audit_rules(rules)
        assert len(results) == 1
        assert results[0].expected_mode == 0o644

    def test_files_not_deduplicated(self, tmp_path: Path) -> None:
        f = _file(tmp_path / "a", 0o644)
        results = audit_rules([_rule(f, 0o644, False), _rule(f, 0o600, False)])
        assert [r.status for r in results] == [Status.PASS, Status.FAIL]

    def test_declaration_order(self, tmp_path: Path) -> None:
        a = _file(tmp_path / "a", 0o644)
        b = _file(tmp_path / "b", 0o644)
        results = audit_rules([_rule(b, 0o644, False), _rule(a, 0o644, False)])
        assert [r.path for r in results] == [b, a]


class TestCustomAudit:
    def test_file(self, tmp_path: Path) -> None:
        f = _file(tmp_path / "f", 0o640)
        [result] = custom_audit(f, 0o640, Importance.MEDIUM)
        assert result.status == Status.PASS
        assert result.importance == Importance.MEDIUM

    def test_directory_recurses(self, tmp_path: Path) -> None:
        _file(tmp_path / "a", 0o644)
        (tmp_path / "sub").mkdir()
        _file(tmp_path / "sub" / "b", 0o644)
        results = custom_audit(str(tmp_path), 0o644, Importance.LOW)
        assert len(results) == 2
        assert all(r.status == Status.PASS for r in results)

    def test_missing_path(self, tmp_path: Path) -> None:
        [result] = custom_audit(tmp_path / "nope", 0o644, Importance.HIGH)
        assert result.status == Status.FAIL
        assert result.severity == Severity.INFO
        assert result.importance == Importance.LOW
        assert result.found_mode == 0
        assert result.error is not None

    @skip_if_root
    def test_permission_denied(self, tmp_path: Path) -> None:
        locked = tmp_path / "locked"
        locked.mkdir()
        _file(locked / "secret", 0o600)
        os.chmod(locked, 0o000)
        try:
            [result] = custom_audit(locked / "secret", 0o600, Importance.LOW)
        finally:
            os.chmod(locked, 0o755)
        assert result.status == Status.FAIL
        assert result.severity == Severity.CRITICAL
        assert result.importance == Importance.HIGH
        assert result.error is not None

    def test_expected_mode_masked(self, tmp_path: Path) -> None:
        f = _file(tmp_path / "f", 0o644)
        [result] = custom_audit(f, 0o100644, Importance.LOW)
        assert result.expected_mode == 0o644
        assert result.status == Status.PASS
