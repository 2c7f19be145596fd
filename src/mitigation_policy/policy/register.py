"""Mitigation register: the catalog and the scan driver.

:class:`MitigationRegister` holds every known :class:`Mitigation` and is
the one place that decides which policies run:

1. :meth:`apply_configuration` gates every policy with the configured
   enforcement level (or a per-mitigation level), then applies operator
   overrides.  Overrides always come second, so an explicit enable or
   disable is never clobbered by the level.
2. :meth:`audit` / :meth:`enforce` visit every mitigation and return a
   :class:`ScanReport`.  Disabled policies are reported SKIPPED and are
   never touched.

Usage::

    register = MitigationRegister([smb, pipes, audit_logon])
    register.apply_configuration(settings.scan)
    report = register.audit()
    for outcome in report.failures:
        ...
"""

from __future__ import annotations

import logging
from typing import Iterable

from mitigation_policy.core.config import MitigationConfig
from mitigation_policy.core.enums import EnforcementLevel, ScanMode
from mitigation_policy.core.errors import (
    DuplicateMitigationError,
    UnknownMitigationError,
)
from mitigation_policy.observability.logger import new_scan_id, set_scan_id

from .mitigation import Mitigation
from .models import ScanReport

logger = logging.getLogger(__name__)


class MitigationRegister:
    """Registry of mitigations plus the audit/enforce driver."""

    def __init__(self, mitigations: Iterable[Mitigation] = ()) -> None:
        self._mitigations: dict[str, Mitigation] = {}
        self._level: EnforcementLevel | None = None
        self._levels: dict[str, EnforcementLevel] = {}
        for mitigation in mitigations:
            self.register(mitigation)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, mitigation: Mitigation) -> None:
        if mitigation.name in self._mitigations:
            raise DuplicateMitigationError(
                f"Mitigation {mitigation.name!r} is already registered"
            )
        self._mitigations[mitigation.name] = mitigation
        logger.debug(
            "MitigationRegister: registered %r (%d policies)",
            mitigation.name, len(mitigation.policies),
        )

    def get(self, name: str) -> Mitigation:
        try:
            return self._mitigations[name]
        except KeyError:
            raise UnknownMitigationError(f"No mitigation named {name!r}") from None

    @property
    def mitigations(self) -> list[Mitigation]:
        """Registered mitigations in registration order."""
        return list(self._mitigations.values())

    @property
    def enforcement_level(self) -> EnforcementLevel | None:
        """Global level from the last :meth:`apply_configuration` call."""
        return self._level

    def level_for(self, name: str) -> EnforcementLevel | None:
        """Level mitigation *name* was gated at by the last configuration."""
        self.get(name)
        return self._levels.get(name)

    def __len__(self) -> int:
        return len(self._mitigations)

    def __contains__(self, name: object) -> bool:
        return name in self._mitigations

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def apply_configuration(self, config: MitigationConfig) -> None:
        """Gate every policy, then apply overrides, in that order.

        Raises:
            UnknownMitigationError: An override or per-mitigation level
                names a mitigation that is not registered.
            UnknownPolicyError: An override names a policy its
                mitigation does not have.
        """
        for name in config.mitigation_levels:
            self.get(name)

        # Resolve every override target before touching any policy so a
        # bad name leaves the register unchanged.
        targets = []
        for override in config.overrides:
            mitigation = self.get(override.mitigation)
            target = (
                mitigation.get_policy(override.policy)
                if override.policy is not None
                else mitigation
            )
            targets.append((target, override.enforced))

        self._level = config.enforcement_level
        self._levels = {}
        for mitigation in self._mitigations.values():
            level = config.level_for(mitigation.name)
            self._levels[mitigation.name] = level
            mitigation.set_enforced(level)

        for target, enforced in targets:
            target.set_enforced(enforced)
            logger.info("Override: %r enforced=%s", target.name, enforced)

        enabled = sum(
            1 for m in self._mitigations.values()
            for p in m.policies if p.is_enforced
        )
        logger.info(
            "Configured %d mitigations at level %s: %d policies enabled, %d overrides",
            len(self._mitigations), config.enforcement_level.value,
            enabled, len(targets),
        )

    # ------------------------------------------------------------------
    # Scans
    # ------------------------------------------------------------------

    def audit(self) -> ScanReport:
        """Check every enabled policy against the system."""
        return self._scan(ScanMode.AUDIT)

    def enforce(self) -> ScanReport:
        """Apply every enabled policy that the system does not match."""
        return self._scan(ScanMode.ENFORCE)

    def run(self, mode: ScanMode) -> ScanReport:
        return self._scan(mode)

    def _scan(self, mode: ScanMode) -> ScanReport:
        scan_id = new_scan_id()
        level = self._level if self._level is not None else EnforcementLevel.NONE
        if self._level is None:
            logger.warning(
                "Scan started before apply_configuration(); "
                "only explicitly enabled policies will run",
            )
        report = ScanReport(scan_id=scan_id, mode=mode, enforcement_level=level)
        try:
            for mitigation in self._mitigations.values():
                if mode == ScanMode.ENFORCE:
                    result = mitigation.enforce()
                else:
                    result = mitigation.audit()
                result.enforcement_level = self._levels.get(mitigation.name)
                report.mitigations.append(result)
            logger.info(
                "Scan finished (%s): %d policies, %d skipped, %d failed, compliant=%s",
                mode.value, report.total, report.skipped,
                len(report.failures), report.compliant,
            )
        finally:
            set_scan_id("")
        return report
