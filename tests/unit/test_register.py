"""Tests for policy.register — configuration ordering and scans."""

import pytest

from mitigation_policy.core.config import MitigationConfig, PolicyOverride
from mitigation_policy.core.enums import EnforcementLevel, OutcomeStatus, ScanMode
from mitigation_policy.core.errors import (
    DuplicateMitigationError,
    UnknownMitigationError,
    UnknownPolicyError,
)
from mitigation_policy.observability.logger import get_scan_id
from mitigation_policy.policy.mitigation import Mitigation
from mitigation_policy.policy.register import MitigationRegister

from stubs import StubPolicy


def _enabled(register):
    return {
        p.name for m in register.mitigations for p in m.policies if p.is_enforced
    }


class TestRegistration:
    def test_registration_order(self, register):
        assert [m.name for m in register.mitigations] == [
            "Harden SMB", "Restrict Anonymous Access",
        ]
        assert len(register) == 2
        assert "Harden SMB" in register

    def test_duplicate_rejected(self, register, smb_mitigation):
        with pytest.raises(DuplicateMitigationError):
            register.register(smb_mitigation)

    def test_get_unknown(self, register):
        with pytest.raises(UnknownMitigationError, match="Harden RDP"):
            register.get("Harden RDP")

    def test_level_unset_before_configuration(self, register):
        assert register.enforcement_level is None


class TestApplyConfiguration:
    def test_gate_only(self, register):
        register.apply_configuration(
            MitigationConfig(enforcement_level=EnforcementLevel.MODERATE)
        )
        assert register.enforcement_level == EnforcementLevel.MODERATE
        assert _enabled(register) == {
            "Disable SMBv1", "Restrict Anonymous Enumeration",
        }

    def test_policy_override_beats_level(self, register):
        register.apply_configuration(
            MitigationConfig(
                enforcement_level=EnforcementLevel.ALL,
                overrides=[
                    PolicyOverride(
                        mitigation="Harden SMB", policy="Disable SMBv1", enforced=False,
                    ),
                ],
            )
        )
        assert "Disable SMBv1" not in _enabled(register)
        assert "Require SMB Signing" in _enabled(register)

    def test_mitigation_override_enables_all_policies(self, register):
        register.apply_configuration(
            MitigationConfig(
                enforcement_level=EnforcementLevel.NONE,
                overrides=[PolicyOverride(mitigation="Harden SMB", enforced=True)],
            )
        )
        assert _enabled(register) == {"Disable SMBv1", "Require SMB Signing"}

    def test_reapplying_configuration_keeps_overrides(self, register):
        config = MitigationConfig(
            enforcement_level=EnforcementLevel.LOW,
            overrides=[
                PolicyOverride(
                    mitigation="Harden SMB", policy="Require SMB Signing", enforced=True,
                ),
            ],
        )
        register.apply_configuration(config)
        register.apply_configuration(config)
        assert "Require SMB Signing" in _enabled(register)

    def test_per_mitigation_level(self, register):
        register.apply_configuration(
            MitigationConfig(
                enforcement_level=EnforcementLevel.LOW,
                mitigation_levels={"Restrict Anonymous Access": EnforcementLevel.HIGH},
            )
        )
        assert _enabled(register) == {
            "Disable SMBv1", "Restrict Anonymous Enumeration",
        }

    def test_unknown_override_mitigation(self, register):
        config = MitigationConfig(
            overrides=[PolicyOverride(mitigation="Harden RDP", enforced=True)],
        )
        with pytest.raises(UnknownMitigationError):
            register.apply_configuration(config)

    def test_unknown_override_policy_leaves_register_unchanged(self, register):
        register.apply_configuration(MitigationConfig(enforcement_level=EnforcementLevel.ALL))
        before = _enabled(register)
        config = MitigationConfig(
            enforcement_level=EnforcementLevel.NONE,
            overrides=[
                PolicyOverride(mitigation="Harden SMB", policy="Disable SMBv3", enforced=True),
            ],
        )
        with pytest.raises(UnknownPolicyError):
            register.apply_configuration(config)
        assert _enabled(register) == before
        assert register.enforcement_level == EnforcementLevel.ALL

    def test_unknown_mitigation_level(self, register):
        config = MitigationConfig(mitigation_levels={"Harden RDP": "high"})
        with pytest.raises(UnknownMitigationError):
            register.apply_configuration(config)


class TestScans:
    def test_audit(self, register, store):
        register.apply_configuration(MitigationConfig(enforcement_level=EnforcementLevel.MODERATE))
        report = register.audit()
        assert report.mode == ScanMode.AUDIT
        assert report.enforcement_level == EnforcementLevel.MODERATE
        assert report.total == 3
        assert report.skipped == 1
        assert report.compliant is False
        assert report.counts() == {
            "skipped": 1, "compliant": 0, "non_compliant": 2, "applied": 0, "failed": 0,
        }
        assert store.writes == 0

    def test_enforce_then_audit_compliant(self, register, store):
        register.apply_configuration(MitigationConfig(enforcement_level=EnforcementLevel.MODERATE))
        report = register.enforce()
        assert report.mode == ScanMode.ENFORCE
        assert report.compliant is True
        assert report.counts()["applied"] == 2
        assert register.audit().compliant is True
        # Signing is HIGH and was never applied
        assert store.read(
            r"HKLM\System\CurrentControlSet\Services\LanmanServer\Parameters\RequireSecuritySignature"
        ) is None

    def test_run_dispatches_on_mode(self, register):
        register.apply_configuration(MitigationConfig())
        assert register.run(ScanMode.AUDIT).mode == ScanMode.AUDIT
        assert register.run(ScanMode.ENFORCE).mode == ScanMode.ENFORCE

    def test_each_scan_gets_fresh_id(self, register):
        register.apply_configuration(MitigationConfig())
        first, second = register.audit(), register.audit()
        assert first.scan_id and second.scan_id
        assert first.scan_id != second.scan_id
        assert get_scan_id() == ""

    def test_scan_survives_failing_mitigation(self):
        broken = StubPolicy("broken", EnforcementLevel.LOW, raises=True)
        later = StubPolicy("later", EnforcementLevel.LOW)
        register = MitigationRegister([
            Mitigation("first", policies=[broken]),
            Mitigation("second", policies=[later]),
        ])
        register.apply_configuration(MitigationConfig(enforcement_level=EnforcementLevel.LOW))
        report = register.enforce()
        assert [o.policy for o in report.failures] == ["broken"]
        assert later.applied is True
        assert report.mitigations[1].outcomes[0].status == OutcomeStatus.APPLIED

    def test_scan_without_configuration(self):
        policy = StubPolicy(level=EnforcementLevel.LOW)
        register = MitigationRegister([Mitigation("m", policies=[policy])])
        report = register.enforce()
        assert report.enforcement_level == EnforcementLevel.NONE
        assert report.outcomes[0].status == OutcomeStatus.SKIPPED
        assert policy.enforce_calls == 0
        assert report.mitigations[0].enforcement_level is None

    def test_reports_carry_per_mitigation_level(self, register):
        register.apply_configuration(
            MitigationConfig(
                enforcement_level=EnforcementLevel.LOW,
                mitigation_levels={"Restrict Anonymous Access": EnforcementLevel.HIGH},
            )
        )
        assert register.level_for("Harden SMB") == EnforcementLevel.LOW
        assert register.level_for("Restrict Anonymous Access") == EnforcementLevel.HIGH
        for report in (register.audit(), register.enforce()):
            assert report.enforcement_level == EnforcementLevel.LOW
            levels = {m.mitigation: m.enforcement_level for m in report.mitigations}
            assert levels == {
                "Harden SMB": EnforcementLevel.LOW,
                "Restrict Anonymous Access": EnforcementLevel.HIGH,
            }

    def test_level_for_unknown_mitigation(self, register):
        with pytest.raises(UnknownMitigationError):
            register.level_for("Harden RDP")
