# SPDX-License-Identifier: MIT
"""Symlink auditor — existence, type, and (optionally) exact target checks."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from permaudit.audit.base import SymlinkResult, SymlinkRule


def check_symlink(rule: SymlinkRule) -> SymlinkResult:
    """Check that ``rule.path`` is a symlink and, if given, points at ``rule.target_link``.

    The target comparison is a plain string match; neither side is
    normalized or resolved. Never raises for filesystem problems, they end
    up in ``error``.
    """

    def _fail(error: str) -> SymlinkResult:
        return SymlinkResult(
            path=rule.path,
            target=None,
            target_link=rule.target_link,
            passed=False,
            error=error,
        )

    # Follows the link, so a dangling symlink counts as missing.
    if not os.path.exists(rule.path):
        return _fail("Symlink not found")

    try:
        st = os.lstat(rule.path)
    except OSError as exc:
        return _fail(f"Failed to get metadata: {exc}")
    if not stat.S_ISLNK(st.st_mode):
        return _fail("Path is not a symlink")

    try:
        target = os.readlink(rule.path)
    except OSError as exc:
        return _fail(f"Failed to read symlink target: {exc}")

    return SymlinkResult(
        path=rule.path,
        target=target,
        target_link=rule.target_link,
        passed=rule.target_link is None or target == rule.target_link,
    )


def audit_link(path: Path | str, target_link: Path | str | None = None) -> SymlinkResult:
    """Check one symlink, optionally against an expected target.

    A ``Path`` target is compared by its string form, still without
    normalization.
    """
    expected = os.fspath(target_link) if target_link is not None else None
    return check_symlink(SymlinkRule(path=Path(path), target_link=expected))
