"""Scan result models.

- :class:`PolicyOutcome`: what happened to one policy during a scan.
- :class:`MitigationReport`: outcomes for every policy of one mitigation.
- :class:`ScanReport`: all mitigation reports for one audit/enforce run.

Reports are plain data; how they are stored or rendered is up to the
caller.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from mitigation_policy.core.enums import EnforcementLevel, OutcomeStatus, ScanMode

# Statuses that count as "the system satisfies the policy"
_SATISFIED = frozenset({OutcomeStatus.COMPLIANT, OutcomeStatus.APPLIED})


class PolicyOutcome(BaseModel):
    """Result for a single policy."""

    policy: str
    level: EnforcementLevel
    enforced: bool
    status: OutcomeStatus
    reason: str = ""


class MitigationReport(BaseModel):
    """Results for all policies in one mitigation."""

    mitigation: str
    # Level this mitigation was gated at; None before any configuration
    enforcement_level: EnforcementLevel | None = None
    outcomes: list[PolicyOutcome] = Field(default_factory=list)

    @property
    def active(self) -> list[PolicyOutcome]:
        """Outcomes of policies that were enforced in this scan."""
        return [o for o in self.outcomes if o.status != OutcomeStatus.SKIPPED]

    @property
    def compliant(self) -> bool:
        """True if every enforced policy matches (or was applied)."""
        return all(o.status in _SATISFIED for o in self.active)

    @property
    def failed(self) -> list[PolicyOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]


class ScanReport(BaseModel):
    """Aggregate result of one scan over a register."""

    scan_id: str
    mode: ScanMode
    # Global level; per-mitigation levels are on each MitigationReport
    enforcement_level: EnforcementLevel
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    mitigations: list[MitigationReport] = Field(default_factory=list)

    @property
    def outcomes(self) -> list[PolicyOutcome]:
        return [o for m in self.mitigations for o in m.outcomes]

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.status == OutcomeStatus.SKIPPED)

    @property
    def failures(self) -> list[PolicyOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]

    @property
    def compliant(self) -> bool:
        return all(m.compliant for m in self.mitigations)

    def counts(self) -> dict[str, int]:
        """Number of outcomes per status value."""
        result = {status.value: 0 for status in OutcomeStatus}
        for o in self.outcomes:
            result[o.status.value] += 1
        return result
