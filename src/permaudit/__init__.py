"""permaudit: audit Linux file permissions and ownership against expected values."""

from permaudit.audit import (
    AuditError,
    ConfigError,
    Importance,
    OwnershipResult,
    PermissionResult,
    Severity,
    Status,
    SymlinkResult,
    audit_all,
    audit_link,
    audit_logs,
    audit_network,
    audit_system,
    audit_user,
    check_owner,
    custom_audit,
    load_ownership_config,
    load_permission_config,
    parse_mode,
    run_bundles,
    summarize,
)

__all__ = [
    "AuditError",
    "ConfigError",
    "Importance",
    "OwnershipResult",
    "PermissionResult",
    "Severity",
    "Status",
    "SymlinkResult",
    "audit_all",
    "audit_link",
    "audit_logs",
    "audit_network",
    "audit_system",
    "audit_user",
    "check_owner",
    "custom_audit",
    "load_ownership_config",
    "load_permission_config",
    "parse_mode",
    "run_bundles",
    "summarize",
]
