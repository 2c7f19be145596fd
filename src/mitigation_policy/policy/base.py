"""Abstract mitigation policy.

A mitigation policy is a single setting, configuration, or change to be
enforced on the system.  Every concrete policy provides two operations:

- :meth:`MitigationPolicy.enforce` applies the change (idempotent).
- :meth:`MitigationPolicy.matches_system` checks the live system
  without touching it.

Whether a policy takes part in a scan is decided by the enforcement
level gate: the driver calls ``set_enforced(level)`` once for every
policy when a scan begins, then ``set_enforced(True/False)`` for operator
exceptions.  A later gate call replaces an earlier override, so the
order matters; :class:`~mitigation_policy.policy.register.MitigationRegister`
applies it correctly.

Usage::

    class DisableAnonymousPipes(MitigationPolicy):
        def __init__(self, store):
            super().__init__(
                "Disable Anonymous Pipes",
                EnforcementLevel.MODERATE,
                "Anonymously accessible named pipes enable lateral movement.",
            )
            self._store = store

        def enforce(self) -> bool: ...
        def matches_system(self) -> bool: ...

    policy = DisableAnonymousPipes(store)
    policy.set_enforced(EnforcementLevel.HIGH)
    if policy.is_enforced and not policy.matches_system():
        policy.enforce()

Prefer writing a policy per *kind* of setting (see
:class:`~mitigation_policy.policy.value_policy.ValuePolicy`) over one
class per individual mitigation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from mitigation_policy.core.enums import EnforcementLevel
from mitigation_policy.core.errors import PolicyDefinitionError

logger = logging.getLogger(__name__)


class MitigationPolicy(ABC):
    """Base class for a policy enforced by a mitigation.

    Args:
        name: Brief description of what the policy does, e.g.
            ``"Disable Anonymously Accessible Named Pipes"``.  Must not be
            empty.
        level: Lowest enforcement level at which the policy is enabled by
            default.  Normally LOW, MODERATE or HIGH.
        description: Optional rationale, e.g. the attacks it blocks and a
            reference.  ``None`` means no description was supplied.

    Raises:
        PolicyDefinitionError: If ``name`` is empty or ``level`` is not an
            :class:`EnforcementLevel`.
    """

    def __init__(
        self,
        name: str,
        level: EnforcementLevel,
        description: str | None = None,
    ) -> None:
        if not isinstance(name, str) or not name.strip():
            raise PolicyDefinitionError("Mitigation policy name must not be empty")
        if not isinstance(level, EnforcementLevel):
            raise PolicyDefinitionError(
                f"Policy {name!r}: level must be an EnforcementLevel, got {level!r}"
            )
        self._name = name
        self._level = level
        self._description = description
        self._enforced = EnforcementLevel.NONE >= level

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @abstractmethod
    def enforce(self) -> bool:
        """Apply the policy's change to the system.

        Must be idempotent: when the system already matches, this is a
        no-op that still returns True.

        Returns:
            True if the system has the policy enforced after the call;
            False if the change could not be applied.
        """

    @abstractmethod
    def matches_system(self) -> bool:
        """Check whether the current system state satisfies the policy.

        Read-only, independent of :attr:`is_enforced`, and safe to call
        before :meth:`enforce` ever ran.

        Returns:
            True if the system already has the policy's changes in place.
        """

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str | None:
        return self._description

    @property
    def level(self) -> EnforcementLevel:
        """Minimum level at which the policy is enforced by default."""
        return self._level

    @property
    def is_enforced(self) -> bool:
        return self._enforced

    # ------------------------------------------------------------------
    # Gate
    # ------------------------------------------------------------------

    def set_enforced(self, value: bool | EnforcementLevel) -> None:
        """Decide whether the policy takes part in the next scan.

        * ``set_enforced(level)``: enabled iff ``level >= self.level``.
        * ``set_enforced(True/False)``: manual override, ignores levels.

        Raises:
            TypeError: For any other argument type.
        """
        if isinstance(value, EnforcementLevel):
            self._enforced = value >= self._level
            logger.debug(
                "Policy %r gated at %s (declared %s): enforced=%s",
                self._name, value.value, self._level.value, self._enforced,
            )
        elif isinstance(value, bool):
            self._enforced = value
            logger.debug("Policy %r override: enforced=%s", self._name, value)
        else:
            raise TypeError(
                "set_enforced() expects a bool or an EnforcementLevel, "
                f"got {type(value).__name__}"
            )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, "
            f"level={self._level.value}, enforced={self._enforced})"
        )
