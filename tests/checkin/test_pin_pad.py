from __future__ import annotations

from datetime import datetime

from src.academy_attendance.academy_attendance.checkin.pin_pad import KioskPinPad
from src.academy_attendance.academy_attendance.core.constants import DEFAULT_WELCOME_MESSAGE
from src.academy_attendance.academy_attendance.core.enums import PinPadState
from src.academy_attendance.academy_attendance.core.exceptions import GENERIC_CHECKIN_FAILURE
from tests.fakes import FakeClock, build_world


def _pad(clock: FakeClock):
    world = build_world(clock)
    return world, KioskPinPad(world.checkin_gate, world.settings_store, idle_seconds=30, clock=clock)


def _type(pad: KioskPinPad, digits: str) -> None:
    for d in digits:
        pad.press(d)


def test_successful_flow_returns_to_idle_on_acknowledge():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world, pad = _pad(clock)

    assert pad.state == PinPadState.IDLE
    _type(pad, "1234")
    assert pad.state == PinPadState.PIN_ENTRY
    assert pad.masked == "****"

    assert pad.submit() == PinPadState.SUCCESS
    assert pad.message == "Welcome, Alex Chen!"
    assert pad.last_result.class_id == 1

    assert pad.acknowledge() == PinPadState.IDLE
    assert pad.digit_count == 0


def test_short_pin_stays_on_keypad_without_calling_the_gate():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world, pad = _pad(clock)

    _type(pad, "12")
    assert pad.submit() == PinPadState.PIN_ENTRY
    assert pad.message == "Enter your 4-digit PIN"
    assert world.attendance_repo.records == {}


def test_extra_digits_and_non_digits_are_ignored():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    _, pad = _pad(clock)

    _type(pad, "12x345")
    assert pad.digit_count == 4
    pad.backspace()
    assert pad.masked == "***"
    pad.clear()
    assert pad.state == PinPadState.IDLE


def test_failure_shows_generic_message_for_wrong_pin():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    _, pad = _pad(clock)

    _type(pad, "9999")
    assert pad.submit() == PinPadState.FAILURE
    assert pad.message == GENERIC_CHECKIN_FAILURE

    # Keypad is frozen until acknowledged.
    pad.press("1")
    assert pad.state == PinPadState.FAILURE


def test_remote_failure_shows_generic_message():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world, pad = _pad(clock)
    world.attendance_repo.fail_writes = True

    _type(pad, "1234")
    assert pad.submit() == PinPadState.FAILURE
    assert pad.message == GENERIC_CHECKIN_FAILURE


def test_idle_timeout_resets_result_screen_and_partial_entry():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    _, pad = _pad(clock)

    _type(pad, "1234")
    pad.submit()
    clock.advance(seconds=29)
    assert pad.tick() is False
    clock.advance(seconds=1)
    assert pad.tick() is True
    assert pad.state == PinPadState.IDLE

    _type(pad, "12")
    clock.advance(seconds=31)
    pad.press("3")
    assert pad.masked == "*"


def test_idle_pad_shows_the_configured_welcome_message():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world, pad = _pad(clock)
    assert pad.message == DEFAULT_WELCOME_MESSAGE

    world.settings_store.update(welcome_message="Osu! Enter your PIN.")
    _type(pad, "9")
    assert pad.message is None
    pad.backspace()
    assert pad.state == PinPadState.IDLE
    assert pad.message == "Osu! Enter your PIN."

    _type(pad, "1234")
    pad.submit()
    pad.acknowledge()
    assert pad.message == "Osu! Enter your PIN."


def test_non_ascii_digits_are_ignored():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    _, pad = _pad(clock)

    _type(pad, "١٢٣٤")
    assert pad.state == PinPadState.IDLE
    assert pad.digit_count == 0
