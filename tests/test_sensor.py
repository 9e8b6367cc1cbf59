"""Tests for StepPet sensors and the pet device."""

from homeassistant.core import HomeAssistant
from homeassistant.helpers import device_registry as dr, entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.steppet import const
from tests.helpers import STEP_ENTITY


async def _create_pet(hass: HomeAssistant, name: str = "Sprout") -> str:
    response = await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_CREATE_PET,
        {"pet_name": name},
        blocking=True,
        return_response=True,
    )
    await hass.async_block_till_done()
    return response["internal_id"]


def _entity_id(hass: HomeAssistant, entry: MockConfigEntry, pet_id: str, suffix: str) -> str:
    entity_id = er.async_get(hass).async_get_entity_id(
        "sensor", const.DOMAIN, f"{entry.entry_id}_{pet_id}{suffix}"
    )
    assert entity_id is not None
    return entity_id


async def test_sensors_created_for_new_pet(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """A new pet gets five sensors grouped under one device."""
    pet_id = await _create_pet(hass)

    device = dr.async_get(hass).async_get_device(identifiers={(const.DOMAIN, pet_id)})
    assert device is not None
    assert device.name == "Sprout (StepPet)"

    entries = er.async_entries_for_device(er.async_get(hass), device.id)
    assert {entry.unique_id for entry in entries} == {
        f"{init_integration.entry_id}_{pet_id}{suffix}"
        for suffix in (
            const.SENSOR_UID_SUFFIX_LEVEL,
            const.SENSOR_UID_SUFFIX_GROWTH_STAGE,
            const.SENSOR_UID_SUFFIX_TOTAL_STEPS,
            const.SENSOR_UID_SUFFIX_DAILY_STEPS,
            const.SENSOR_UID_SUFFIX_WEEKLY_STEPS,
        )
    }


async def test_egg_sensor_states(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """An egg has no level yet and reports its hatch progress."""
    pet_id = await _create_pet(hass)

    level = hass.states.get(
        _entity_id(hass, init_integration, pet_id, const.SENSOR_UID_SUFFIX_LEVEL)
    )
    stage = hass.states.get(
        _entity_id(hass, init_integration, pet_id, const.SENSOR_UID_SUFFIX_GROWTH_STAGE)
    )

    assert level.state == "unknown"
    assert level.attributes["hatch_ready"] is False
    assert level.attributes["steps_to_hatch"] == 5000
    assert level.attributes["can_claim_feed"] is False
    assert stage.state == const.GROWTH_STAGE_EGG


async def test_step_sensors_follow_refresh(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Step tallies update after the step sensor changes."""
    pet_id = await _create_pet(hass)

    hass.states.async_set(STEP_ENTITY, "5200")
    await hass.async_block_till_done()
    await hass.services.async_call(
        const.DOMAIN, const.SERVICE_REFRESH, {"pet_name": "Sprout"}, blocking=True
    )
    await hass.async_block_till_done()

    total = hass.states.get(
        _entity_id(hass, init_integration, pet_id, const.SENSOR_UID_SUFFIX_TOTAL_STEPS)
    )
    daily = hass.states.get(
        _entity_id(hass, init_integration, pet_id, const.SENSOR_UID_SUFFIX_DAILY_STEPS)
    )
    weekly = hass.states.get(
        _entity_id(hass, init_integration, pet_id, const.SENSOR_UID_SUFFIX_WEEKLY_STEPS)
    )
    level = hass.states.get(
        _entity_id(hass, init_integration, pet_id, const.SENSOR_UID_SUFFIX_LEVEL)
    )

    assert total.state == "5200"
    assert total.attributes["unit_of_measurement"] == const.UNIT_STEPS
    assert total.attributes["starting_step_count"] == 0
    assert daily.state == "5200"
    assert "last_reset" in daily.attributes
    assert weekly.state == "5200"
    assert level.attributes["hatch_ready"] is True
    assert level.attributes["claimable_milestones"] == ["milestone-5k"]


async def test_level_sensor_after_hatch(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """A hatched pet reports its level and species."""
    pet_id = await _create_pet(hass)
    hass.states.async_set(STEP_ENTITY, "5000")
    await hass.async_block_till_done()

    await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_HATCH,
        {"pet_name": "Sprout", "species": "noctuff"},
        blocking=True,
    )
    await hass.async_block_till_done()

    level = hass.states.get(
        _entity_id(hass, init_integration, pet_id, const.SENSOR_UID_SUFFIX_LEVEL)
    )
    stage = hass.states.get(
        _entity_id(hass, init_integration, pet_id, const.SENSOR_UID_SUFFIX_GROWTH_STAGE)
    )
    assert level.state == "1"
    assert level.attributes["species"] == "noctuff"
    assert level.attributes["category"] == "shadow"
    assert stage.state == const.GROWTH_STAGE_BABY
