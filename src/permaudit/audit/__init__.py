# SPDX-License-Identifier: MIT
"""Permission and ownership audit engine."""

from collections.abc import Iterable

from permaudit.audit.base import (
    Importance,
    OwnershipResult,
    OwnershipRule,
    PathStatus,
    PermissionResult,
    PermissionRule,
    RuleBundle,
    Severity,
    Status,
    SymlinkResult,
    SymlinkRule,
)
from permaudit.audit.bundles import (
    BUNDLES,
    Bundle,
    audit_all,
    audit_logs,
    audit_network,
    audit_system,
    audit_user,
    run_bundle,
)
from permaudit.audit.config import AuditProfile, check_gate, load_bundle, load_profile
from permaudit.audit.loader import ConfigError, load_ownership_config, load_permission_config
from permaudit.audit.modes import AuditError, parse_mode
from permaudit.audit.ownership import check_owner
from permaudit.audit.permissions import custom_audit
from permaudit.audit.severity import classify
from permaudit.audit.symlink import audit_link

__all__ = [
    "BUNDLES",
    "AuditError",
    "AuditProfile",
    "Bundle",
    "ConfigError",
    "Importance",
    "OwnershipResult",
    "OwnershipRule",
    "PathStatus",
    "PermissionResult",
    "PermissionRule",
    "RuleBundle",
    "Severity",
    "Status",
    "SymlinkResult",
    "SymlinkRule",
    "audit_all",
    "audit_link",
    "audit_logs",
    "audit_network",
    "audit_system",
    "audit_user",
    "check_gate",
    "check_owner",
    "classify",
    "custom_audit",
    "load_bundle",
    "load_ownership_config",
    "load_permission_config",
    "load_profile",
    "parse_mode",
    "run_bundle",
    "run_bundles",
    "summarize",
]


def run_bundles(cli_bundle: str | None = None) -> list[PermissionResult]:
    """Convenience: resolve bundle selection, run each, return results."""
    results: list[PermissionResult] = []
    for bundle in load_bundle(cli_bundle):
        results.extend(run_bundle(bundle))
    return results


def summarize(results: Iterable[PermissionResult]) -> dict[str, int]:
    """Convenience: count permission results by status."""
    counts = {"checked": 0, "passed": 0, "strict": 0, "failed": 0}
    for r in results:
        counts["checked"] += 1
        if r.status is Status.PASS:
            counts["passed"] += 1
        elif r.status is Status.STRICT:
            counts["strict"] += 1
        else:
            counts["failed"] += 1
    return counts
