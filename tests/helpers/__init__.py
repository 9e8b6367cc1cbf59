"""Test helpers for StepPet integration tests.

This module re-exports the helpers for convenient imports:

    from tests.helpers import (
        FakePedometer, FakeNow, TZ, local,
        ScenarioResult, run_scenario, run_yaml_scenario,
    )

See individual modules for full documentation:
- fakes.py: In-memory pedometer and settable wall clock
- setup.py: Declarative walking scenarios (dict or YAML)
"""

from tests.helpers.fakes import (
    STEP_ENTITY,
    TZ,
    FakeNow,
    FakePedometer,
    fail_storage_writes,
    local,
)
from tests.helpers.setup import ScenarioResult, run_scenario, run_yaml_scenario

__all__ = [
    "STEP_ENTITY",
    "TZ",
    "FakeNow",
    "FakePedometer",
    "ScenarioResult",
    "fail_storage_writes",
    "local",
    "run_scenario",
    "run_yaml_scenario",
]
