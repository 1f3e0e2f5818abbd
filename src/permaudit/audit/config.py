# SPDX-License-Identifier: MIT
"""Profile and bundle selection for audit runs."""

from __future__ import annotations

import os
from collections.abc import Collection, Iterable
from dataclasses import dataclass

from permaudit.audit.base import OwnershipResult, PermissionResult, Severity
from permaudit.audit.bundles import BUNDLES, Bundle


@dataclass(frozen=True)
class AuditProfile:
    """Configuration for an audit profile; controls the gate threshold."""

    name: str
    fail_on: Severity


PROFILES: dict[str, AuditProfile] = {
    "general": AuditProfile(name="general", fail_on=Severity.CRITICAL),
    "security": AuditProfile(name="security", fail_on=Severity.HIGH),
    "strict": AuditProfile(name="strict", fail_on=Severity.LOW),
}

PROFILE_ENV = "PERMAUDIT_PROFILE"
BUNDLE_ENV = "PERMAUDIT_BUNDLE"
DEFAULT_PROFILE = "general"
ALL_BUNDLES = "all"


def _resolve(explicit: str | None, env_var: str, default: str, known: Collection[str], kind: str) -> str:
    """Pick a name from the caller, then *env_var*, then *default*; reject unknown names."""
    name = explicit or os.environ.get(env_var, default)
    if name not in known:
        msg = f"Unknown {kind}: {name!r}. Valid {kind}s: {sorted(known)}"
        raise ValueError(msg)
    return name


def load_profile(cli_profile: str | None = None) -> AuditProfile:
    """Return the gate profile named by the caller or ``PERMAUDIT_PROFILE``.

    Falls back to ``general`` and raises ``ValueError`` for names not in
    :data:`PROFILES`.
    """
    return PROFILES[_resolve(cli_profile, PROFILE_ENV, DEFAULT_PROFILE, PROFILES, "profile")]


def load_bundle(cli_bundle: str | None = None) -> list[Bundle]:
    """Resolve which built-in bundles to run, caller > ``PERMAUDIT_BUNDLE`` > ``"all"``."""
    name = _resolve(cli_bundle, BUNDLE_ENV, ALL_BUNDLES, [*BUNDLES, ALL_BUNDLES], "bundle")
    if name == ALL_BUNDLES:
        return list(BUNDLES.values())
    return [BUNDLES[name]]


def check_gate(
    results: Iterable[PermissionResult | OwnershipResult], profile: AuditProfile
) -> bool:
    """Return True if any result meets or exceeds the profile's fail_on threshold."""
    return any(r.severity.rank >= profile.fail_on.rank for r in results)
