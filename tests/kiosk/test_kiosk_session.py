from __future__ import annotations

from datetime import datetime

import pytest

from src.academy_attendance.academy_attendance.core.exceptions import RemoteWriteError, ValidationError
from src.academy_attendance.academy_attendance.kiosk.session import KioskSession
from tests.fakes import MONDAY, FakeClock, FakeScheduler, build_world


def _session(world, scheduler, clock, *, kiosk_enabled=True, **kwargs):
    world.settings_store.update(kiosk_mode_enabled=kiosk_enabled)
    return KioskSession(world.ledger, world.settings_store, scheduler=scheduler, clock=clock, **kwargs)


def test_entering_kiosk_mode_fetches_and_schedules_short_refresh():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world = build_world(clock)
    world.checkin_gate.check_in_with_pin("1234")
    scheduler = FakeScheduler()
    session = _session(world, scheduler, clock)

    session.enter_kiosk_mode()

    assert session.kiosk_mode is True
    assert [r.student_name for r in session.recent] == ["Alex Chen"]
    assert [t.delay for t in scheduler.pending] == [10]


def test_refresh_shows_newest_first_and_limits_rows():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world = build_world(clock)
    scheduler = FakeScheduler()
    session = _session(world, scheduler, clock, recent_limit=2)
    session.enter_kiosk_mode()

    for student_id in (1, 2, 3):
        clock.advance(minutes=1)
        world.ledger.mark_single(student_id, 1, MONDAY, "present")
    scheduler.fire_pending()

    assert [r.student_id for r in session.recent] == [3, 2]
    assert len(scheduler.pending) == 1


def test_exit_cancels_timer_and_drops_late_responses():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world = build_world(clock)
    scheduler = FakeScheduler()
    session = _session(world, scheduler, clock)
    session.enter_kiosk_mode()
    timer = scheduler.pending[0]

    session.exit_kiosk_mode()
    world.ledger.mark_single(1, 1, MONDAY, "present")
    # A timer that already fired before cancel took effect.
    timer.callback()

    assert timer.cancelled
    assert session.kiosk_mode is False
    assert session.recent == ()
    assert scheduler.pending == []


def test_dashboard_watch_uses_the_longer_interval():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world = build_world(clock)
    scheduler = FakeScheduler()
    session = _session(world, scheduler, clock)

    session.watch()
    assert [t.delay for t in scheduler.pending] == [30]

    session.enter_kiosk_mode()
    assert [t.delay for t in scheduler.pending] == [10]


def test_refresh_failure_keeps_previous_rows():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world = build_world(clock)
    world.ledger.mark_single(1, 1, MONDAY, "present")
    scheduler = FakeScheduler()
    session = _session(world, scheduler, clock)
    session.enter_kiosk_mode()

    def boom(*args, **kwargs):
        raise RemoteWriteError("down")

    world.attendance_repo.list_recent_checkins = boom
    scheduler.fire_pending()

    assert [r.student_id for r in session.recent] == [1]
    assert session.last_error == "down"
    assert len(scheduler.pending) == 1


def test_kiosk_refresh_must_be_faster_than_dashboard():
    world = build_world()
    with pytest.raises(ValueError):
        KioskSession(
            world.ledger,
            world.settings_store,
            kiosk_refresh_seconds=30,
            dashboard_refresh_seconds=30,
            scheduler=FakeScheduler(),
        )


def test_kiosk_mode_is_refused_while_disabled_in_settings():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world = build_world(clock)
    scheduler = FakeScheduler()
    session = _session(world, scheduler, clock, kiosk_enabled=False)

    with pytest.raises(ValidationError):
        session.enter_kiosk_mode()
    assert session.kiosk_mode is False
    assert scheduler.pending == []

    session.watch()
    assert [t.delay for t in scheduler.pending] == [30]


def test_session_exposes_the_welcome_message():
    clock = FakeClock(datetime(2026, 10, 19, 8, 50))
    world = build_world(clock)
    session = _session(world, FakeScheduler(), clock)

    world.settings_store.update(welcome_message="Bow in, then enter your PIN.")

    assert session.welcome_message == "Bow in, then enter your PIN."
