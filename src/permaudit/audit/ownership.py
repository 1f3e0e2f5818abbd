# SPDX-License-Identifier: MIT
"""Ownership auditor — compares a path's uid/gid with the expected owner."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from permaudit.audit.base import OwnershipResult, OwnershipRule, Severity, SymlinkRule
from permaudit.audit.severity import owner_severity
from permaudit.audit.symlink import check_symlink
from permaudit.audit.walk import DirIdentity, EntryKind, walk

log = logging.getLogger(__name__)


def _symlink_result(rule: OwnershipRule, path: Path) -> OwnershipResult:
    # Only the link's existence is verified, not who owns it.
    sym = check_symlink(SymlinkRule(path=path))
    return OwnershipResult(
        path=sym.path,
        expected_uid=rule.expected_uid,
        expected_gid=rule.expected_gid,
        found_uid=None,
        found_gid=None,
        passed=sym.passed,
        severity=Severity.NONE if sym.passed else Severity.CRITICAL,
        error=sym.error,
    )


def _error_result(rule: OwnershipRule, path: Path, error: str) -> OwnershipResult:
    return OwnershipResult(
        path=path,
        expected_uid=rule.expected_uid,
        expected_gid=rule.expected_gid,
        found_uid=None,
        found_gid=None,
        passed=False,
        severity=Severity.CRITICAL,
        error=error,
    )


def _owner_result(rule: OwnershipRule, path: Path) -> OwnershipResult:
    try:
        st = os.stat(path) if rule.follow_symlinks else os.lstat(path)
    except (OSError, ValueError) as exc:
        log.warning("Cannot stat %s: %s", path, exc)
        return _error_result(rule, path, f"Failed to read metadata: {exc}")

    return OwnershipResult(
        path=path,
        expected_uid=rule.expected_uid,
        expected_gid=rule.expected_gid,
        found_uid=st.st_uid,
        found_gid=st.st_gid,
        passed=st.st_uid == rule.expected_uid and st.st_gid == rule.expected_gid,
        severity=owner_severity(rule.expected_uid, rule.expected_gid, st.st_uid, st.st_gid),
    )


def check_ownership(rule: OwnershipRule) -> OwnershipResult:
    """Audit ``rule.path`` alone, ignoring ``rule.recursive``.

    Symlinks go to the symlink auditor. ``follow_symlinks`` only picks
    between stat and lstat for paths that are not symlinks themselves.
    """
    try:
        is_link = stat.S_ISLNK(os.lstat(rule.path).st_mode)
    except (OSError, ValueError):
        is_link = False
    if is_link:
        return _symlink_result(rule, rule.path)
    return _owner_result(rule, rule.path)


def _is_directory(path: Path) -> bool:
    try:
        return stat.S_ISDIR(os.lstat(path).st_mode)
    except (OSError, ValueError):
        return False


def audit_ownership(rule: OwnershipRule, visited: set[DirIdentity]) -> list[OwnershipResult]:
    """Audit ``rule.path`` and, for recursive rules, every entry below it.

    Unlike the permission engine, directories report their own ownership.
    A root that is not a directory (missing, a FIFO, a symlink) is audited
    on its own, so it always yields exactly one result.
    """
    if not rule.recursive or not _is_directory(rule.path):
        return [check_ownership(rule)]

    results: list[OwnershipResult] = []
    for entry in walk(rule.path, visited):
        if entry.kind is EntryKind.SYMLINK:
            results.append(_symlink_result(rule, entry.path))
        elif entry.kind is EntryKind.ERROR:
            results.append(_error_result(rule, entry.path, entry.error or "unknown error"))
        else:
            results.append(_owner_result(rule, entry.path))
    return results


def check_owner(
    path: Path | str,
    expected_uid: int,
    expected_gid: int,
    follow_symlinks: bool = False,
) -> OwnershipResult:
    """Check one path's owner; never recursive."""
    rule, _status = OwnershipRule.new(path, expected_uid, expected_gid, follow_symlinks)
    return check_ownership(rule)
