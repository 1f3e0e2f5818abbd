# SPDX-License-Identifier: MIT
"""Audit enums, rule/result dataclasses, and the RuleBundle protocol."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

MODE_MASK = 0o777


class Importance(StrEnum):
    """Caller-assigned relevance of an audited path."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Severity(StrEnum):
    """Computed risk of a single permission or ownership mismatch."""

    NONE = "None"
    INFO = "Info"
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        """Ordering used for gate comparison (higher is worse)."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.NONE: 0,
    Severity.INFO: 1,
    Severity.LOW: 2,
    Severity.MEDIUM: 3,
    Severity.HIGH: 4,
    Severity.CRITICAL: 5,
}


class Status(StrEnum):
    """Raw outcome of comparing a found mode with the expected one."""

    PASS = "Pass"
    FAIL = "Fail"  # more permissive (numerically greater) than expected
    STRICT = "Strict"  # numerically less than expected


class PathStatus(StrEnum):
    """What a rule's path turned out to be when the rule was built."""

    VALID_FILE = "ValidFile"
    VALID_DIRECTORY = "ValidDirectory"
    NOT_FOUND = "NotFound"
    PERMISSION_DENIED = "PermissionDenied"


def classify_path(path: Path) -> PathStatus:
    """Classify *path* (following symlinks) for rule construction."""
    try:
        st = os.stat(path)
    except PermissionError:
        return PathStatus.PERMISSION_DENIED
    except (OSError, ValueError):
        return PathStatus.NOT_FOUND
    if stat.S_ISREG(st.st_mode):
        return PathStatus.VALID_FILE
    if stat.S_ISDIR(st.st_mode):
        return PathStatus.VALID_DIRECTORY
    return PathStatus.NOT_FOUND


def _omit_none_error(payload: dict[str, Any], error: str | None) -> dict[str, Any]:
    if error is not None:
        payload["error"] = error
    return payload


@dataclass(frozen=True)
class PermissionRule:
    """Expected mode for a file or directory tree."""

    path: Path
    expected_mode: int
    recursive: bool
    importance: Importance

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "expected_mode", self.expected_mode & MODE_MASK)

    @classmethod
    def new(
        cls, path: Path | str, expected_mode: int, importance: Importance
    ) -> tuple[PermissionRule, PathStatus]:
        """Build a rule, deriving ``recursive`` from what *path* is on disk.

        Directories are recursive, everything else is not.
        """
        path = Path(path)
        status = classify_path(path)
        rule = cls(
            path=path,
            expected_mode=expected_mode,
            recursive=status is PathStatus.VALID_DIRECTORY,
            importance=importance,
        )
        return rule, status


@dataclass(frozen=True)
class PermissionResult:
    """Outcome of auditing one filesystem entry's mode."""

    severity: Severity
    status: Status
    path: Path
    expected_mode: int
    found_mode: int
    importance: Importance
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Flat mapping with modes rendered as octal strings."""
        payload: dict[str, Any] = {
            "severity": self.severity.value,
            "status": self.status.value,
            "path": str(self.path),
            "expected_mode": format(self.expected_mode, "o"),
            "found_mode": format(self.found_mode, "o"),
            "importance": self.importance.value,
        }
        return _omit_none_error(payload, self.error)


@dataclass(frozen=True)
class OwnershipRule:
    """Expected owning user and group for a path."""

    path: Path
    expected_uid: int
    expected_gid: int
    follow_symlinks: bool = False
    recursive: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    @classmethod
    def new(
        cls,
        path: Path | str,
        expected_uid: int,
        expected_gid: int,
        follow_symlinks: bool,
    ) -> tuple[OwnershipRule, PathStatus]:
        """Build a rule the same way :meth:`PermissionRule.new` does."""
        path = Path(path)
        status = classify_path(path)
        rule = cls(
            path=path,
            expected_uid=expected_uid,
            expected_gid=expected_gid,
            follow_symlinks=follow_symlinks,
            recursive=status is PathStatus.VALID_DIRECTORY,
        )
        return rule, status


@dataclass(frozen=True)
class OwnershipResult:
    """Outcome of auditing one path's uid/gid."""

    path: Path
    expected_uid: int | None
    expected_gid: int | None
    found_uid: int | None
    found_gid: int | None
    passed: bool
    severity: Severity
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "path": str(self.path),
            "expected_uid": self.expected_uid,
            "expected_gid": self.expected_gid,
            "found_uid": self.found_uid,
            "found_gid": self.found_gid,
            "pass": self.passed,
            "severity": self.severity.value,
        }
        return _omit_none_error(payload, self.error)


@dataclass(frozen=True)
class SymlinkRule:
    """A symlink to check; ``target_link=None`` checks existence only."""

    path: Path
    target_link: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))


@dataclass(frozen=True)
class SymlinkResult:
    """Outcome of a symlink check."""

    path: Path
    target: str | None
    target_link: str | None
    passed: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "path": str(self.path),
            "target": self.target,
            "target_link": self.target_link,
            "pass": self.passed,
        }
        return _omit_none_error(payload, self.error)


@runtime_checkable
class RuleBundle(Protocol):
    """Anything that can hand out a fixed list of permission rules."""

    name: str

    def rules(self) -> list[PermissionRule]: ...
