# SPDX-License-Identifier: MIT
"""Built-in rule bundles — fixed tables of canonical paths and expected modes."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from permaudit.audit.base import Importance, PermissionResult, PermissionRule, RuleBundle
from permaudit.audit.permissions import audit_rules

log = logging.getLogger(__name__)

# (path, expected_mode, importance, recursive)
BundleEntry = tuple[str, int, Importance, bool]


@dataclass(frozen=True)
class Bundle:
    """A named, fixed list of permission rules."""

    name: str
    description: str
    entries: tuple[BundleEntry, ...]

    def rules(self) -> list[PermissionRule]:
        return [
            PermissionRule(path=path, expected_mode=mode, recursive=recursive, importance=importance)
            for path, mode, importance, recursive in self.entries
        ]


USER_BUNDLE = Bundle(
    name="user",
    description="User and authentication files",
    entries=(
        ("/etc/passwd", 0o644, Importance.MEDIUM, False),
        ("/etc/shadow", 0o600, Importance.HIGH, False),
        ("/etc/group", 0o644, Importance.MEDIUM, False),
        ("/etc/gshadow", 0o600, Importance.HIGH, False),
        ("/etc/sudoers", 0o440, Importance.HIGH, False),
        # Directory itself; not descended
        ("/etc/pam.d", 0o755, Importance.HIGH, False),
        # Files inside pam.d
        ("/etc/pam.d", 0o644, Importance.HIGH, True),
    ),
)

SYSTEM_BUNDLE = Bundle(
    name="system",
    description="System configuration and boot files",
    entries=(
        ("/boot/grub/grub.cfg", 0o640, Importance.HIGH, False),
        ("/etc/fstab", 0o644, Importance.MEDIUM, False),
        ("/etc/sysctl.conf", 0o644, Importance.MEDIUM, False),
        ("/etc/systemd", 0o644, Importance.HIGH, True),
    ),
)

NETWORK_BUNDLE = Bundle(
    name="network",
    description="Network configuration files",
    entries=(
        ("/etc/hosts", 0o644, Importance.LOW, False),
        ("/etc/resolv.conf", 0o644, Importance.LOW, False),
        ("/etc/network/interfaces", 0o644, Importance.MEDIUM, False),
    ),
)

LOG_BUNDLE = Bundle(
    name="log",
    description="Login record logs",
    entries=(
        ("/var/log/wtmp", 0o664, Importance.HIGH, False),
        ("/var/log/btmp", 0o664, Importance.HIGH, False),
    ),
)

BUNDLES: dict[str, Bundle] = {
    bundle.name: bundle for bundle in (USER_BUNDLE, SYSTEM_BUNDLE, NETWORK_BUNDLE, LOG_BUNDLE)
}


def run_bundle(bundle: RuleBundle) -> list[PermissionResult]:
    """Audit every rule of *bundle* under one shared visited set."""
    log.debug("Running bundle %s", bundle.name)
    return audit_rules(bundle.rules(), set())


def audit_user() -> list[PermissionResult]:
    return run_bundle(USER_BUNDLE)


def audit_system() -> list[PermissionResult]:
    return run_bundle(SYSTEM_BUNDLE)


def audit_network() -> list[PermissionResult]:
    return run_bundle(NETWORK_BUNDLE)


def audit_logs() -> list[PermissionResult]:
    return run_bundle(LOG_BUNDLE)


def audit_all() -> list[PermissionResult]:
    """Run every built-in bundle in turn, each with its own visited set."""
    results: list[PermissionResult] = []
    for bundle in BUNDLES.values():
        results.extend(run_bundle(bundle))
    return results
