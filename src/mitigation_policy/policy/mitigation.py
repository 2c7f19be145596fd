"""Mitigation: a named group of policies addressing one threat.

A mitigation such as "Harden SMB" bundles several policies (disable
SMBv1, require signing, ...).  Gate and override calls on the mitigation
fan out to all of its policies; audit and enforce produce one
:class:`MitigationReport`.

A policy that raises is reported as FAILED and the remaining policies
still run.
"""

from __future__ import annotations

import logging
from typing import Iterable

from mitigation_policy.core.enums import EnforcementLevel, OutcomeStatus
from mitigation_policy.core.errors import (
    DuplicatePolicyError,
    PolicyDefinitionError,
    UnknownPolicyError,
)
from mitigation_policy.core.interfaces import IMitigationPolicy

from .models import MitigationReport, PolicyOutcome

logger = logging.getLogger(__name__)


class Mitigation:
    """Ordered collection of policies under one name."""

    def __init__(
        self,
        name: str,
        description: str | None = None,
        policies: Iterable[IMitigationPolicy] = (),
    ) -> None:
        if not isinstance(name, str) or not name.strip():
            raise PolicyDefinitionError("Mitigation name must not be empty")
        self._name = name
        self._description = description
        self._policies: dict[str, IMitigationPolicy] = {}
        for policy in policies:
            self.add_policy(policy)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str | None:
        return self._description

    @property
    def policies(self) -> tuple[IMitigationPolicy, ...]:
        return tuple(self._policies.values())

    def add_policy(self, policy: IMitigationPolicy) -> None:
        if not isinstance(policy, IMitigationPolicy):
            raise PolicyDefinitionError(
                f"Mitigation {self._name!r}: {policy!r} does not implement "
                "the mitigation policy interface"
            )
        if policy.name in self._policies:
            raise DuplicatePolicyError(
                f"Mitigation {self._name!r} already has a policy named {policy.name!r}"
            )
        self._policies[policy.name] = policy

    def get_policy(self, name: str) -> IMitigationPolicy:
        try:
            return self._policies[name]
        except KeyError:
            raise UnknownPolicyError(
                f"Mitigation {self._name!r} has no policy named {name!r}"
            ) from None

    def set_enforced(self, value: bool | EnforcementLevel) -> None:
        """Apply a gate level or an override to every policy."""
        for policy in self._policies.values():
            policy.set_enforced(value)

    # ------------------------------------------------------------------
    # Scans
    # ------------------------------------------------------------------

    def matches_system(self) -> bool:
        """True if every enforced policy matches the system."""
        return self.audit().compliant

    def audit(self) -> MitigationReport:
        outcomes = [_audit_policy(p) for p in self._policies.values()]
        return MitigationReport(mitigation=self._name, outcomes=outcomes)

    def enforce(self) -> MitigationReport:
        outcomes = [_enforce_policy(p) for p in self._policies.values()]
        report = MitigationReport(mitigation=self._name, outcomes=outcomes)
        if report.failed:
            logger.warning(
                "Mitigation %r: %d of %d active policies failed to apply",
                self._name, len(report.failed), len(report.active),
            )
        return report

    def __repr__(self) -> str:
        return f"Mitigation(name={self._name!r}, policies={len(self._policies)})"


def _outcome(
    policy: IMitigationPolicy, status: OutcomeStatus, reason: str = "",
) -> PolicyOutcome:
    return PolicyOutcome(
        policy=policy.name,
        level=policy.level,
        enforced=policy.is_enforced,
        status=status,
        reason=reason,
    )


def _audit_policy(policy: IMitigationPolicy) -> PolicyOutcome:
    if not policy.is_enforced:
        return _outcome(policy, OutcomeStatus.SKIPPED)
    try:
        matches = policy.matches_system()
    except Exception as exc:
        logger.warning("Policy %r raised during audit: %s", policy.name, exc)
        return _outcome(policy, OutcomeStatus.FAILED, f"audit raised: {exc}")
    if matches:
        return _outcome(policy, OutcomeStatus.COMPLIANT)
    return _outcome(policy, OutcomeStatus.NON_COMPLIANT, "system does not match")


def _enforce_policy(policy: IMitigationPolicy) -> PolicyOutcome:
    if not policy.is_enforced:
        return _outcome(policy, OutcomeStatus.SKIPPED)
    try:
        if policy.matches_system():
            return _outcome(policy, OutcomeStatus.COMPLIANT)
        applied = policy.enforce()
    except Exception as exc:
        logger.warning("Policy %r raised during enforce: %s", policy.name, exc)
        return _outcome(policy, OutcomeStatus.FAILED, f"enforce raised: {exc}")
    if applied:
        return _outcome(policy, OutcomeStatus.APPLIED)
    return _outcome(policy, OutcomeStatus.FAILED, "enforce returned False")
