"""Root test configuration for corsgate.

Clears the CORSGATE_* environment variables for every test so a developer's
shell (or CI environment) cannot change config loading or policy overrides
underneath the suite. Tests that exercise an override set it themselves with
monkeypatch.
"""

import pytest

CORSGATE_ENV_VARS = ("CORSGATE_CONFIG", "CORSGATE_PORT", "CORSGATE_ALLOW_ORIGIN")


@pytest.fixture(autouse=True)
def clear_corsgate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove CORSGATE_* overrides for the duration of each test."""
    for name in CORSGATE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
