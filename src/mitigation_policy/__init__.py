"""Policy engine for system hardening mitigations.

Models each hardening change as a :class:`MitigationPolicy` that can be
enforced on, and verified against, the live system, enabled by default
according to an :class:`EnforcementLevel`.
"""

__version__ = "0.1.0"

from mitigation_policy.core.enums import EnforcementLevel, OutcomeStatus, ScanMode
from mitigation_policy.policy import (
    InMemorySettingsStore,
    Mitigation,
    MitigationPolicy,
    MitigationRegister,
    ValuePolicy,
)

__all__ = [
    "EnforcementLevel",
    "InMemorySettingsStore",
    "Mitigation",
    "MitigationPolicy",
    "MitigationRegister",
    "OutcomeStatus",
    "ScanMode",
    "ValuePolicy",
]
