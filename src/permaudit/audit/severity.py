# SPDX-License-Identifier: MIT
"""Severity and status classification for permission and ownership mismatches."""

from __future__ import annotations

from permaudit.audit.base import MODE_MASK, Severity, Status

WORLD_WRITE = 0o002
GROUP_PERMS = 0o070
OTHER_PERMS = 0o007

# Ownership thresholds
ROOT_ID = 0
SYSTEM_ID_LIMIT = 100
USER_ID_START = 1000


def classify(expected: int, found: int) -> Severity:
    """Rank how risky *found* is compared with *expected*.

    World-writable always wins, then exact match, then extra group/other
    bits, then numerically smaller (stricter) modes.
    """
    expected &= MODE_MASK
    found &= MODE_MASK

    if found & WORLD_WRITE:
        return Severity.CRITICAL
    if found == expected:
        return Severity.NONE
    if (found & GROUP_PERMS) > (expected & GROUP_PERMS) or (found & OTHER_PERMS) > (
        expected & OTHER_PERMS
    ):
        return Severity.HIGH
    if found < expected:
        return Severity.INFO
    return Severity.LOW


def status_for(expected: int, found: int) -> Status:
    """Plain numeric comparison; not a bitwise subset test."""
    expected &= MODE_MASK
    found &= MODE_MASK
    if found == expected:
        return Status.PASS
    if found < expected:
        return Status.STRICT
    return Status.FAIL


def owner_severity(expected_uid: int, expected_gid: int, found_uid: int, found_gid: int) -> Severity:
    """Rank an ownership mismatch by what kind of account was expected."""
    if found_uid == expected_uid and found_gid == expected_gid:
        return Severity.NONE
    if expected_uid == ROOT_ID or expected_gid == ROOT_ID:
        return Severity.CRITICAL
    if expected_uid < SYSTEM_ID_LIMIT or expected_gid < SYSTEM_ID_LIMIT:
        return Severity.HIGH
    if expected_uid >= USER_ID_START or expected_gid >= USER_ID_START:
        return Severity.INFO
    return Severity.LOW
