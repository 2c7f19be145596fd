"""Mitigation policies, groups, and the register that drives scans.

- **MitigationPolicy**: abstract enforce/verify unit with level gating
- **ValuePolicy**: pins one key in a settings store
- **Mitigation**: named group of policies
- **MitigationRegister**: catalog plus audit/enforce driver
"""

from mitigation_policy.policy.base import MitigationPolicy
from mitigation_policy.policy.mitigation import Mitigation
from mitigation_policy.policy.models import MitigationReport, PolicyOutcome, ScanReport
from mitigation_policy.policy.register import MitigationRegister
from mitigation_policy.policy.value_policy import InMemorySettingsStore, ValuePolicy

__all__ = [
    "InMemorySettingsStore",
    "Mitigation",
    "MitigationPolicy",
    "MitigationRegister",
    "MitigationReport",
    "PolicyOutcome",
    "ScanReport",
    "ValuePolicy",
]
