"""Enumerations used across the mitigation engine."""

from __future__ import annotations

from enum import Enum
from typing import Any

from .errors import ConfigError


class EnforcementLevel(str, Enum):
    """Ordered aggressiveness tier for mitigation policies.

    NONE < LOW < MODERATE < HIGH < ALL.  A policy declared at a level is
    enabled by default whenever the selected level is at or above it.
    """

    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    ALL = "all"

    @property
    def rank(self) -> int:
        """Numeric rank for comparisons (0–4)."""
        return list(EnforcementLevel).index(self)

    def _other_rank(self, other: object, op: str) -> int:
        # str's reflected comparison would order levels alphabetically
        if not isinstance(other, EnforcementLevel):
            raise TypeError(
                f"'{op}' not supported between EnforcementLevel and "
                f"{type(other).__name__}; use EnforcementLevel.parse() first"
            )
        return other.rank

    def __lt__(self, other: object) -> bool:
        return self.rank < self._other_rank(other, "<")

    def __le__(self, other: object) -> bool:
        return self.rank <= self._other_rank(other, "<=")

    def __gt__(self, other: object) -> bool:
        return self.rank > self._other_rank(other, ">")

    def __ge__(self, other: object) -> bool:
        return self.rank >= self._other_rank(other, ">=")

    @classmethod
    def parse(cls, raw: Any) -> EnforcementLevel:
        """Resolve a level from its value, member name, or integer rank.

        ``"moderate"``, ``"MODERATE"``, ``"Moderate"`` and ``2`` all
        resolve to :attr:`MODERATE`.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            levels = list(cls)
            if 0 <= raw < len(levels):
                return levels[raw]
            raise ConfigError(f"Enforcement level rank out of range: {raw}")
        if isinstance(raw, str):
            text = raw.strip().lower()
            if text.isdigit():
                return cls.parse(int(text))
            for level in cls:
                if text == level.value:
                    return level
        raise ConfigError(
            f"Unknown enforcement level {raw!r} "
            f"(expected one of: {', '.join(lvl.value for lvl in cls)})"
        )


class ScanMode(str, Enum):
    """What a scan does with each enabled policy."""

    AUDIT = "audit"      # matches_system() only
    ENFORCE = "enforce"  # enforce() where the system does not match


class OutcomeStatus(str, Enum):
    """Per-policy result of a scan."""

    SKIPPED = "skipped"              # policy not enforced at this level
    COMPLIANT = "compliant"          # system already matched
    NON_COMPLIANT = "non_compliant"  # audit found a mismatch
    APPLIED = "applied"              # enforce() brought the system into line
    FAILED = "failed"                # enforce() returned False or raised
