"""Shared fixtures for StepPet tests."""

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.steppet.const import (
    CONF_STEP_ENTITY,
    CONF_UPDATE_INTERVAL,
    DEFAULT_UPDATE_INTERVAL,
    DOMAIN,
)
from custom_components.steppet.coordinator import SteppetDataCoordinator
from custom_components.steppet.store import SteppetStore
from custom_components.steppet.utils.dt_utils import Clock
from tests.helpers.fakes import STEP_ENTITY, TZ, FakeNow, FakePedometer, local

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="StepPet",
        data={},
        options={
            CONF_STEP_ENTITY: STEP_ENTITY,
            CONF_UPDATE_INTERVAL: DEFAULT_UPDATE_INTERVAL,
        },
        entry_id="test_entry_id",
    )


@pytest.fixture
def fake_now() -> FakeNow:
    """Return a settable wall clock starting Wednesday 2025-03-12 08:00 local."""
    return FakeNow(local(2025, 3, 12, 8, 0))


@pytest.fixture
def clock(fake_now: FakeNow) -> Clock:  # pylint: disable=redefined-outer-name
    """Return a Clock driven by fake_now in the test timezone."""
    return Clock(now_fn=fake_now, tz=TZ)


@pytest.fixture
def fake_pedometer() -> FakePedometer:
    """Return an in-memory pedometer."""
    return FakePedometer()


@pytest.fixture
async def store(hass: HomeAssistant) -> SteppetStore:
    """Return an initialized, empty store."""
    steppet_store = SteppetStore(hass)
    with patch.object(steppet_store._store, "async_load", return_value=None):  # pylint: disable=protected-access
        await steppet_store.async_initialize()
    return steppet_store


@pytest.fixture
async def coordinator(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    store: SteppetStore,  # pylint: disable=redefined-outer-name
    fake_pedometer: FakePedometer,  # pylint: disable=redefined-outer-name
    clock: Clock,  # pylint: disable=redefined-outer-name
) -> SteppetDataCoordinator:
    """Return a coordinator wired to the fake pedometer and clock."""
    mock_config_entry.add_to_hass(hass)
    steppet_coordinator = SteppetDataCoordinator(
        hass, mock_config_entry, store, pedometer=fake_pedometer, clock=clock
    )
    await steppet_coordinator.pet_manager.async_setup()
    return steppet_coordinator


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the StepPet integration against a real step sensor state."""
    hass.states.async_set(STEP_ENTITY, "0")
    mock_config_entry.add_to_hass(hass)

    assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    return mock_config_entry
