# SPDX-License-Identifier: MIT
"""Config loader — turns a TOML rule file into permission and ownership audits.

Example document::

    [[perm_rules]]
    path = "/etc/passwd"
    expected_mode = 644          # or "rw-r--r--" or "u=rw,g=r,o=r"
    importance = "Medium"
    recursive = false

    [[owner_rules]]
    path = "/etc/shadow"
    expected_uid = 0
    expected_gid = 42

Loading is all-or-nothing: every rule is validated before any is audited,
and the first bad rule raises :class:`ConfigError`.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    StrictInt,
    StrictStr,
    ValidationError,
)

from permaudit.audit.base import (
    MODE_MASK,
    Importance,
    OwnershipResult,
    OwnershipRule,
    PermissionResult,
    PermissionRule,
)
from permaudit.audit.modes import AuditError, parse_mode
from permaudit.audit.ownership import audit_ownership
from permaudit.audit.permissions import check_permissions

log = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a rule file cannot be read, parsed, or validated."""

    def __init__(self, message: str, source: str = "<string>") -> None:
        self.source = source
        super().__init__(f"{source}: {message}")


# --- Schema ---


class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class PermissionConfig(_ConfigModel):
    path: str
    expected_mode: StrictInt | StrictStr
    importance: Importance
    recursive: bool | None = None


class OwnerConfig(_ConfigModel):
    path: str
    expected_uid: NonNegativeInt | None = None
    expected_gid: NonNegativeInt | None = None
    follow_symlinks: bool | None = None
    recursive: bool | None = None


class AuditConfig(_ConfigModel):
    perm_rules: list[PermissionConfig] = Field(default_factory=list)
    owner_rules: list[OwnerConfig] = Field(default_factory=list)


def _validation_summary(e: ValidationError) -> str:
    """Field paths and error codes only; raw values are not echoed."""
    parts: list[str] = []
    for err in e.errors():
        loc = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{loc}: {err['type']}")
    return "; ".join(parts)


def _validate(data: dict[str, Any], source: str) -> AuditConfig:
    try:
        return AuditConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config: {_validation_summary(exc)}", source) from exc


def parse_config(text: str, source: str = "<string>") -> AuditConfig:
    """Parse and validate a TOML rule document held in memory."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse TOML config: {exc}", source) from exc
    return _validate(data, source)


def read_config(path: Path | str) -> AuditConfig:
    """Read, parse, and validate a TOML rule file."""
    source = str(path)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as exc:
        raise ConfigError(f"Failed to read config file: {exc}", source) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse TOML config: {exc}", source) from exc
    return _validate(data, source)


# --- Rule construction ---


def _checked_path(raw: str, kind: str, source: str) -> Path:
    if not raw.strip():
        raise ConfigError(f"{kind} rule has empty or invalid path", source)
    if not os.path.exists(raw):
        raise ConfigError(f"{kind} rule path '{raw}' does not exist", source)
    return Path(raw)


def _resolve_mode(entry: PermissionConfig, source: str) -> int:
    # Integers are read as their octal spelling: 644 means 0o644.
    raw = str(entry.expected_mode)
    try:
        mode = parse_mode(raw)
    except AuditError as exc:
        raise ConfigError(
            f"Invalid expected_mode '{raw}' for path '{entry.path}': {exc}", source
        ) from exc
    if mode > MODE_MASK:
        raise ConfigError(
            f"Invalid expected_mode {mode:o} for path '{entry.path}'. Must be <= 777.", source
        )
    return mode


def build_permission_rules(config: AuditConfig, source: str = "<string>") -> list[PermissionRule]:
    """Validate every ``perm_rules`` entry and build rules, failing on the first bad one."""
    rules: list[PermissionRule] = []
    for entry in config.perm_rules:
        path = _checked_path(entry.path, "Permission", source)
        mode = _resolve_mode(entry, source)
        rule, _status = PermissionRule.new(path, mode, entry.importance)
        if entry.recursive is not None:
            rule = dataclasses.replace(rule, recursive=entry.recursive)
        rules.append(rule)
    return rules


def build_ownership_rules(config: AuditConfig, source: str = "<string>") -> list[OwnershipRule]:
    """Validate every ``owner_rules`` entry; uid/gid default to root (0)."""
    rules: list[OwnershipRule] = []
    for entry in config.owner_rules:
        path = _checked_path(entry.path, "Ownership", source)
        rule, _status = OwnershipRule.new(
            path,
            entry.expected_uid if entry.expected_uid is not None else 0,
            entry.expected_gid if entry.expected_gid is not None else 0,
            bool(entry.follow_symlinks),
        )
        if entry.recursive is not None:
            rule = dataclasses.replace(rule, recursive=entry.recursive)
        rules.append(rule)
    return rules


# --- Entry points ---


def load_permission_config(path: Path | str) -> list[PermissionResult]:
    """Load ``perm_rules`` from *path* and audit them in declaration order.

    Each rule gets its own visited set.

    Raises:
        ConfigError: If the file or any rule in it is invalid. No results
            are returned in that case.
    """
    rules = build_permission_rules(read_config(path), str(path))
    log.info("Loaded %d permission rule(s) from %s", len(rules), path)

    results: list[PermissionResult] = []
    for rule in rules:
        results.extend(check_permissions(rule, set()))
    return results


def load_ownership_config(path: Path | str) -> list[OwnershipResult]:
    """Load ``owner_rules`` from *path* and audit them in declaration order.

    Raises:
        ConfigError: If the file or any rule in it is invalid.
    """
    rules = build_ownership_rules(read_config(path), str(path))
    log.info("Loaded %d ownership rule(s) from %s", len(rules), path)

    results: list[OwnershipResult] = []
    for rule in rules:
        results.extend(audit_ownership(rule, set()))
    return results
