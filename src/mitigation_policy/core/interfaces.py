"""Protocol interfaces for the mitigation engine.

Module boundaries are defined here as Protocol classes.  Any object that
satisfies :class:`IMitigationPolicy` can sit in a catalog, whether or not
it derives from :class:`~mitigation_policy.policy.base.MitigationPolicy`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .enums import EnforcementLevel


# ---------------------------------------------------------------------------
# Mitigation policy
# ---------------------------------------------------------------------------

@runtime_checkable
class IMitigationPolicy(Protocol):
    """A single enforceable, verifiable system setting."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str | None: ...

    @property
    def level(self) -> EnforcementLevel: ...

    @property
    def is_enforced(self) -> bool: ...

    def set_enforced(self, value: bool | EnforcementLevel) -> None: ...

    def enforce(self) -> bool:
        """Apply the policy. Idempotent. True iff the system now matches."""
        ...

    def matches_system(self) -> bool:
        """Read-only check of the live system against the policy."""
        ...


# ---------------------------------------------------------------------------
# Settings store
# ---------------------------------------------------------------------------

@runtime_checkable
class ISettingsStore(Protocol):
    """Key/value view of system configuration (registry, sysctl, ...).

    Implementations raise :class:`SettingsStoreError` when the backing
    system cannot be read or written.
    """

    def read(self, key: str) -> Any | None:
        """Current value, or None when the key is absent."""
        ...

    def write(self, key: str, value: Any) -> None: ...
