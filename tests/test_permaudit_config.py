# SPDX-License-Identifier: MIT
"""Tests for permaudit.audit.config — profiles, bundle selection and the gate."""

from __future__ import annotations

from pathlib import Path

import pytest

from permaudit.audit import run_bundles, summarize
from permaudit.audit.base import Importance, OwnershipResult, PermissionResult, Severity, Status
from permaudit.audit.config import PROFILES, check_gate, load_bundle, load_profile


def _perm(severity: Severity, status: Status = Status.FAIL) -> PermissionResult:
    return PermissionResult(
        severity=severity,
        status=status,
        path=Path("/x"),
        expected_mode=0o644,
        found_mode=0o644,
        importance=Importance.LOW,
    )


class TestProfiles:
    def test_all_profiles_exist(self) -> None:
        assert set(PROFILES) == {"general", "security", "strict"}

    def test_thresholds(self) -> None:
        assert PROFILES["general"].fail_on == Severity.CRITICAL
        assert PROFILES["security"].fail_on == Severity.HIGH
        assert PROFILES["strict"].fail_on == Severity.LOW


class TestLoadProfile:
    def test_cli_override_highest_priority(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERMAUDIT_PROFILE", "general")
        assert load_profile(cli_profile="security").name == "security"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERMAUDIT_PROFILE", "strict")
        assert load_profile().name == "strict"

    def test_default_is_general(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PERMAUDIT_PROFILE", raising=False)
        assert load_profile().name == "general"

    def test_invalid_profile_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown profile"):
            load_profile(cli_profile="nonexistent")

    def test_invalid_env_profile_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERMAUDIT_PROFILE", "badname")
        with pytest.raises(ValueError, match="Valid profiles"):
            load_profile()


class TestLoadBundle:
    def test_default_is_all(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PERMAUDIT_BUNDLE", raising=False)
        assert [b.name for b in load_bundle()] == ["user", "system", "network", "log"]

    def test_env_selects_one(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERMAUDIT_BUNDLE", "network")
        assert [b.name for b in load_bundle()] == ["network"]

    def test_cli_beats_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERMAUDIT_BUNDLE", "network")
        assert [b.name for b in load_bundle("log")] == ["log"]

    def test_unknown_bundle(self) -> None:
        with pytest.raises(ValueError, match="Unknown bundle"):
            load_bundle("kernel")

    def test_unknown_env_bundle(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERMAUDIT_BUNDLE", "kernel")
        with pytest.raises(ValueError, match="Valid bundles"):
            load_bundle()

    def test_run_bundles_returns_list(self) -> None:
        assert isinstance(run_bundles("log"), list)


class TestCheckGate:
    def test_general_ignores_high(self) -> None:
        assert not check_gate([_perm(Severity.HIGH)], PROFILES["general"])

    def test_general_trips_on_critical(self) -> None:
        assert check_gate([_perm(Severity.LOW), _perm(Severity.CRITICAL)], PROFILES["general"])

    def test_security_trips_on_high(self) -> None:
        assert check_gate([_perm(Severity.HIGH)], PROFILES["security"])

    def test_strict_ignores_info(self) -> None:
        assert not check_gate([_perm(Severity.INFO), _perm(Severity.NONE)], PROFILES["strict"])

    def test_ownership_results(self) -> None:
        result = OwnershipResult(
            path=Path("/x"),
            expected_uid=0,
            expected_gid=0,
            found_uid=1000,
            found_gid=1000,
            passed=False,
            severity=Severity.CRITICAL,
        )
        assert check_gate([result], PROFILES["general"])

    def test_empty(self) -> None:
        assert not check_gate([], PROFILES["strict"])


class TestSummarize:
    def test_counts(self) -> None:
        results = [
            _perm(Severity.NONE, Status.PASS),
            _perm(Severity.INFO, Status.STRICT),
            _perm(Severity.HIGH, Status.FAIL),
            _perm(Severity.CRITICAL, Status.FAIL),
        ]
        assert summarize(results) == {"checked": 4, "passed": 1, "strict": 1, "failed": 2}

    def test_empty(self) -> None:
        assert summarize([]) == {"checked": 0, "passed": 0, "strict": 0, "failed": 0}
