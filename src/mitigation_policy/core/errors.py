"""Custom exception hierarchy for the mitigation engine.

Operational outcomes (a policy that could not be applied, a system that
does not match) are reported as booleans and statuses, never raised.
These exceptions cover misuse and configuration problems only.
"""


class MitigationError(Exception):
    """Base exception for all mitigation engine errors."""


# --- Configuration ---
class ConfigError(MitigationError):
    """Invalid or missing configuration."""


class CatalogLoadError(ConfigError):
    """A mitigation catalog could not be imported or built."""


# --- Definition ---
class PolicyDefinitionError(MitigationError):
    """A policy or mitigation was constructed with invalid arguments."""


class DuplicatePolicyError(PolicyDefinitionError):
    """Two policies with the same name in one mitigation."""


class DuplicateMitigationError(PolicyDefinitionError):
    """Two mitigations with the same name in one register."""


# --- Lookup ---
class UnknownPolicyError(MitigationError, KeyError):
    """No policy with the requested name."""


class UnknownMitigationError(MitigationError, KeyError):
    """No mitigation with the requested name."""


# --- System access ---
class SettingsStoreError(MitigationError):
    """A settings store could not read or write a value."""
