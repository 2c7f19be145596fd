"""Policies that pin one named value in a settings store.

Registry values, sysctl keys, and service start types all reduce to
"key K must hold value V".  :class:`ValuePolicy` implements that once
against an injected :class:`ISettingsStore`, so a catalog instantiates
it with keys and values instead of subclassing per mitigation.
"""

from __future__ import annotations

import logging
from typing import Any

from mitigation_policy.core.enums import EnforcementLevel
from mitigation_policy.core.errors import SettingsStoreError
from mitigation_policy.core.interfaces import ISettingsStore

from .base import MitigationPolicy

logger = logging.getLogger(__name__)


class ValuePolicy(MitigationPolicy):
    """Require ``store[key] == desired``."""

    def __init__(
        self,
        name: str,
        level: EnforcementLevel,
        store: ISettingsStore,
        key: str,
        desired: Any,
        description: str | None = None,
    ) -> None:
        super().__init__(name, level, description)
        self._store = store
        self._key = key
        self._desired = desired

    @property
    def key(self) -> str:
        return self._key

    @property
    def desired(self) -> Any:
        return self._desired

    def matches_system(self) -> bool:
        try:
            current = self._store.read(self._key)
        except SettingsStoreError as exc:
            logger.warning("Policy %r: cannot read %s: %s", self.name, self._key, exc)
            return False
        return current == self._desired

    def enforce(self) -> bool:
        if self.matches_system():
            return True
        try:
            self._store.write(self._key, self._desired)
        except SettingsStoreError as exc:
            logger.warning("Policy %r: cannot write %s: %s", self.name, self._key, exc)
            return False
        applied = self.matches_system()
        if applied:
            logger.info("Policy %r: set %s = %r", self.name, self._key, self._desired)
        else:
            logger.warning(
                "Policy %r: wrote %s but value did not stick", self.name, self._key,
            )
        return applied


class InMemorySettingsStore:
    """Dict-backed :class:`ISettingsStore`.

    ``read_only=True`` makes every write fail, which is how an
    unprivileged process looks to a policy.  ``writes`` counts successful
    writes.
    """

    def __init__(
        self,
        initial: dict[str, Any] | None = None,
        read_only: bool = False,
    ) -> None:
        self._values: dict[str, Any] = dict(initial or {})
        self.read_only = read_only
        self.writes = 0

    def read(self, key: str) -> Any | None:
        return self._values.get(key)

    def write(self, key: str, value: Any) -> None:
        if self.read_only:
            raise SettingsStoreError(f"store is read-only, cannot write {key}")
        self._values[key] = value
        self.writes += 1

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)
