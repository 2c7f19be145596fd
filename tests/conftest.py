"""Shared fixtures for the mitigation-policy test suite."""

from __future__ import annotations

import pytest

from mitigation_policy.core.enums import EnforcementLevel
from mitigation_policy.policy.mitigation import Mitigation
from mitigation_policy.policy.register import MitigationRegister
from mitigation_policy.policy.value_policy import InMemorySettingsStore, ValuePolicy

from stubs import StubPolicy

SMB1_KEY = r"HKLM\System\CurrentControlSet\Services\LanmanServer\Parameters\SMB1"
SIGNING_KEY = (
    r"HKLM\System\CurrentControlSet\Services\LanmanServer\Parameters\RequireSecuritySignature"
)
RESTRICT_ANON_KEY = r"HKLM\System\CurrentControlSet\Control\Lsa\RestrictAnonymous"


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------

@pytest.fixture
def stub_policy() -> StubPolicy:
    return StubPolicy()


# ---------------------------------------------------------------------------
# Settings store and mitigations
# ---------------------------------------------------------------------------

@pytest.fixture
def store() -> InMemorySettingsStore:
    return InMemorySettingsStore({RESTRICT_ANON_KEY: 0, SMB1_KEY: 1})


@pytest.fixture
def smb_mitigation(store) -> Mitigation:
    return Mitigation(
        "Harden SMB",
        "SMBv1 is exploited by EternalBlue-style worms.",
        [
            ValuePolicy("Disable SMBv1", EnforcementLevel.LOW, store, SMB1_KEY, 0),
            ValuePolicy(
                "Require SMB Signing", EnforcementLevel.HIGH, store, SIGNING_KEY, 1,
            ),
        ],
    )


@pytest.fixture
def anon_mitigation(store) -> Mitigation:
    return Mitigation(
        "Restrict Anonymous Access",
        policies=[
            ValuePolicy(
                "Restrict Anonymous Enumeration",
                EnforcementLevel.MODERATE,
                store,
                RESTRICT_ANON_KEY,
                1,
            ),
        ],
    )


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@pytest.fixture
def register(smb_mitigation, anon_mitigation) -> MitigationRegister:
    return MitigationRegister([smb_mitigation, anon_mitigation])
