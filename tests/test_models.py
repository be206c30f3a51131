from __future__ import annotations

import pytest

from pysesame._constants import voltage_to_percentage
from pysesame.models.context import AccessoryContext
from pysesame.models.status import (
    Command,
    ContactState,
    LockState,
    MechStatus,
    SesameShadow,
    parse_shadow_message,
)


def test_lock_state_unknown_values_map_to_unknown() -> None:
    assert LockState(1) == LockState.SECURED
    assert LockState(42) == LockState.UNKNOWN


@pytest.mark.parametrize(
    "state, contact",
    [
        (LockState.SECURED, ContactState.DETECTED),
        (LockState.UNSECURED, ContactState.NOT_DETECTED),
        (LockState.JAMMED, ContactState.NOT_DETECTED),
        (LockState.UNKNOWN, ContactState.NOT_DETECTED),
    ],
)
def test_contact_state_from_lock_state(state: LockState, contact: ContactState) -> None:
    assert ContactState.from_lock_state(state) == contact


def test_commands_are_lock_and_unlock_only() -> None:
    assert {command.name: int(command) for command in Command} == {"LOCK": 82, "UNLOCK": 83}


def test_mechst_locked_full_battery() -> None:
    status = MechStatus.from_mechst("ff03000000000002")

    assert status.is_in_lock_range is True
    assert status.is_in_unlock_range is False
    assert status.lock_state == LockState.SECURED
    assert status.battery_percentage == 100
    assert status.is_battery_critical is False


def test_mechst_unlocked_empty_critical_battery() -> None:
    status = MechStatus.from_mechst("0000000000000024")

    assert status.lock_state == LockState.UNSECURED
    assert status.battery_percentage == 0
    assert status.is_battery_critical is True


def test_mechst_moving_is_ambiguous() -> None:
    status = MechStatus.from_mechst("ff03000000000000")

    assert status.is_ambiguous is True
    assert status.lock_state == LockState.UNKNOWN


@pytest.mark.parametrize("mechst", ["zz", "ff03", ""])
def test_mechst_rejects_bad_input(mechst: str) -> None:
    with pytest.raises(ValueError):
        MechStatus.from_mechst(mechst)


@pytest.mark.parametrize(
    "voltage, expected",
    [(6.3, 100), (6.0, 100), (5.9, 75), (5.0, 7), (4.6, 0), (3.0, 0)],
)
def test_voltage_to_percentage(voltage: float, expected: int) -> None:
    assert voltage_to_percentage(voltage) == expected


def test_shadow_maps_to_status() -> None:
    shadow = SesameShadow.model_validate(
        {
            "batteryPercentage": 94,
            "batteryVoltage": 5.87,
            "position": 11,
            "CHSesame2Status": "locked",
            "timestamp": 1598523693,
        }
    )

    assert shadow.battery_percentage == 94
    assert shadow.status == "locked"
    assert shadow.raw["position"] == 11

    status = shadow.to_mech_status()
    assert status.lock_state == LockState.SECURED
    assert status.battery_percentage == 94
    assert status.is_battery_critical is False


def test_shadow_low_or_out_of_range_battery() -> None:
    low = SesameShadow.model_validate({"batteryPercentage": 12, "CHSesame2Status": "unlocked"}).to_mech_status()
    assert low.lock_state == LockState.UNSECURED
    assert low.is_battery_critical is True

    clamped = SesameShadow.model_validate({"batteryPercentage": 140, "CHSesame2Status": "unlocked"})
    assert clamped.to_mech_status().battery_percentage == 100


def test_shadow_moved_is_ambiguous() -> None:
    shadow = SesameShadow.model_validate({"batteryPercentage": 80, "CHSesame2Status": "moved", "position": None})

    assert shadow.position is None
    assert shadow.to_mech_status().is_ambiguous is True


def test_parse_shadow_message() -> None:
    assert parse_shadow_message({"state": {"reported": {"mechst": "ff03000000000004"}}}) == MechStatus(
        is_in_lock_range=False,
        is_in_unlock_range=True,
        battery_percentage=100,
        is_battery_critical=False,
    )
    assert parse_shadow_message({"state": {"reported": {"wm2s": "x"}}}) is None
    assert parse_shadow_message({"state": "nope"}) is None
    assert parse_shadow_message({}) is None


def test_context_restore_defaults_and_partial_recovery() -> None:
    assert AccessoryContext.restore(None) == AccessoryContext()

    restored = AccessoryContext.restore(
        {"lock_state": 0, "battery_level": 250, "times_opened": 3, "last_reset": 12, "extra": True}
    )

    assert restored.lock_state == LockState.UNSECURED
    assert restored.battery_level == 100
    assert restored.times_opened == 3
    assert restored.last_reset == 12


def test_context_rejects_invalid_assignment() -> None:
    context = AccessoryContext()

    with pytest.raises(ValueError):
        context.times_opened = -1
