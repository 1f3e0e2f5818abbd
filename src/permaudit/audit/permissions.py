# SPDX-License-Identifier: MIT
"""Permission traversal engine — audits file modes against a rule, walking directories."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from permaudit.audit.base import (
    MODE_MASK,
    Importance,
    PathStatus,
    PermissionResult,
    PermissionRule,
    Severity,
    Status,
    SymlinkRule,
)
from permaudit.audit.severity import classify, status_for
from permaudit.audit.symlink import check_symlink
from permaudit.audit.walk import DirIdentity, EntryKind, walk

log = logging.getLogger(__name__)


def _symlink_result(rule: PermissionRule, path: Path) -> PermissionResult:
    sym = check_symlink(SymlinkRule(path=path))
    return PermissionResult(
        severity=Severity.NONE if sym.passed else Severity.INFO,
        status=Status.PASS if sym.passed else Status.STRICT,
        path=sym.path,
        expected_mode=rule.expected_mode,
        found_mode=0,
        importance=rule.importance,
        error=sym.error,
    )


def _error_result(rule: PermissionRule, path: Path, error: str) -> PermissionResult:
    return PermissionResult(
        severity=Severity.CRITICAL,
        status=Status.FAIL,
        path=path,
        expected_mode=rule.expected_mode,
        found_mode=0,
        importance=rule.importance,
        error=error,
    )


def _file_result(rule: PermissionRule, path: Path) -> PermissionResult:
    try:
        found = os.stat(path).st_mode & MODE_MASK
    except OSError as exc:
        log.warning("Cannot stat %s: %s", path, exc)
        return _error_result(rule, path, f"Failed to read metadata: {exc}")

    return PermissionResult(
        severity=classify(rule.expected_mode, found),
        status=status_for(rule.expected_mode, found),
        path=path,
        expected_mode=rule.expected_mode,
        found_mode=found,
        importance=rule.importance,
    )


def check_permissions(rule: PermissionRule, visited: set[DirIdentity]) -> list[PermissionResult]:
    """Audit ``rule.path`` and, for recursive directory rules, everything below it.

    Directories themselves produce no result; only files, symlinks and
    unreadable directories do. A directory rule with ``recursive=False``
    therefore yields nothing. Entries below a directory inherit the rule's
    expected mode and importance.
    """
    results: list[PermissionResult] = []
    for entry in walk(rule.path, visited, descend=rule.recursive):
        if entry.kind is EntryKind.SYMLINK:
            results.append(_symlink_result(rule, entry.path))
        elif entry.kind is EntryKind.FILE:
            results.append(_file_result(rule, entry.path))
        elif entry.kind is EntryKind.ERROR:
            results.append(_error_result(rule, entry.path, entry.error or "unknown error"))
    return results


def audit_rules(
    rules: Iterable[PermissionRule], visited: set[DirIdentity] | None = None
) -> list[PermissionResult]:
    """Run several rules against one shared visited set, concatenating results."""
    if visited is None:
        visited = set()
    results: list[PermissionResult] = []
    for rule in rules:
        log.debug("Auditing %s (expected %o)", rule.path, rule.expected_mode)
        results.extend(check_permissions(rule, visited))
    return results


def custom_audit(
    path: Path | str, expected_mode: int, importance: Importance
) -> list[PermissionResult]:
    """Audit one user-supplied path with a fresh visited set.

    Missing paths yield a single Info/Fail result (importance Low); paths
    that cannot be stat'ed for lack of permission yield a single
    Critical/Fail result (importance High).
    """
    rule, path_status = PermissionRule.new(path, expected_mode, importance)

    if path_status is PathStatus.NOT_FOUND:
        return [
            PermissionResult(
                severity=Severity.INFO,
                status=Status.FAIL,
                path=rule.path,
                expected_mode=rule.expected_mode,
                found_mode=0,
                importance=Importance.LOW,
                error=f"Path not found: {rule.path}",
            )
        ]
    if path_status is PathStatus.PERMISSION_DENIED:
        return [
            PermissionResult(
                severity=Severity.CRITICAL,
                status=Status.FAIL,
                path=rule.path,
                expected_mode=rule.expected_mode,
                found_mode=0,
                importance=Importance.HIGH,
                error=f"Permission denied: {rule.path}",
            )
        ]

    return check_permissions(rule, set())
