from __future__ import annotations

import pytest

from src.academy_attendance.academy_attendance.checkin.model import CheckInSettings
from src.academy_attendance.academy_attendance.checkin.settings import CheckInSettingsStore
from src.academy_attendance.academy_attendance.core.exceptions import ValidationError
from tests.fakes import InMemorySettings


def test_defaults_when_no_row_exists():
    store = CheckInSettingsStore(InMemorySettings())
    settings = store.reload()

    assert settings.auto_checkout_hours == 3
    assert (settings.early_window_minutes, settings.late_window_minutes) == (15, 15)
    assert settings.max_distance_meters == 100
    assert settings.require_pin_verification is True
    assert settings.location_tracking_enabled is False
    assert settings.kiosk_mode_enabled is False


def test_partial_update_keeps_other_fields_and_persists():
    repo = InMemorySettings(CheckInSettings(settings_id=1, late_window_minutes=20))
    store = CheckInSettingsStore(repo)
    store.reload()

    saved = store.update(kiosk_mode_enabled="true", max_distance_meters="250")

    assert saved.kiosk_mode_enabled is True
    assert saved.max_distance_meters == 250
    assert saved.late_window_minutes == 20
    assert repo.row == saved
    assert store.current == saved


@pytest.mark.parametrize(
    "changes",
    [
        {"early_window_minutes": -1},
        {"auto_checkout_hours": 0},
        {"max_distance_meters": "far"},
        {"kiosk_mode_enabled": "maybe"},
        {"welcome_message": "   "},
        {"colour": "red"},
        {},
    ],
)
def test_invalid_updates_are_rejected(changes):
    repo = InMemorySettings()
    store = CheckInSettingsStore(repo)
    store.reload()

    with pytest.raises(ValidationError):
        store.update(**changes)
    assert repo.row is None


def test_reload_picks_up_changes_made_elsewhere():
    repo = InMemorySettings()
    store = CheckInSettingsStore(repo)
    store.reload()

    repo.row = CheckInSettings(settings_id=1, early_window_minutes=5)

    assert store.current.early_window_minutes == 15
    assert store.reload().early_window_minutes == 5
