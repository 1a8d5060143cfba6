from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import CheckInState
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders
from .model import AcademyLocation, CheckInSession, CheckInSettings, Coordinates
from .repository import AcademyLocationRepository, CheckInSessionRepository, CheckInSettingsRepository

# Column names follow the table; field names follow CheckInSettings.
_SETTINGS_COLUMNS = {
    "kiosk_mode_enabled": "kiosk_mode_enabled",
    "auto_checkout_hours": "auto_checkout_hours",
    "require_class_selection": "require_class_selection",
    "early_window_minutes": "allow_early_checkin_minutes",
    "late_window_minutes": "allow_late_checkin_minutes",
    "require_pin_verification": "require_pin_verification",
    "location_tracking_enabled": "enable_location_tracking",
    "max_distance_meters": "max_distance_meters",
    "welcome_message": "welcome_message",
}
_SELECT_COLUMNS = ", ".join(_SETTINGS_COLUMNS.values())


def _to_settings(r: dict) -> CheckInSettings:
    return CheckInSettings(
        settings_id=int(r["settings_id"]),
        kiosk_mode_enabled=bool(r["kiosk_mode_enabled"]),
        auto_checkout_hours=int(r["auto_checkout_hours"]),
        require_class_selection=bool(r["require_class_selection"]),
        early_window_minutes=int(r["allow_early_checkin_minutes"]),
        late_window_minutes=int(r["allow_late_checkin_minutes"]),
        require_pin_verification=bool(r["require_pin_verification"]),
        location_tracking_enabled=bool(r["enable_location_tracking"]),
        max_distance_meters=int(r["max_distance_meters"]),
        welcome_message=r["welcome_message"],
    )


class MySQLCheckInSettingsRepository(CheckInSettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[CheckInSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT settings_id, {_SELECT_COLUMNS}
                FROM check_in_settings
                ORDER BY settings_id ASC
                LIMIT 1
                """
            )
            r = fetchone(cur)
            return _to_settings(r) if r else None

    def save(self, settings: CheckInSettings, *, now: datetime) -> CheckInSettings:
        values = [getattr(settings, f) for f in _SETTINGS_COLUMNS]
        columns = list(_SETTINGS_COLUMNS.values())
        column_list = ", ".join(columns)
        placeholders = in_placeholders([*values, now])

        with db_cursor(self._conn_factory) as (_, cur):
            if settings.settings_id is None:
                cur.execute(
                    f"""
                    INSERT INTO check_in_settings({column_list}, updated_at)
                    VALUES({placeholders})
                    """,
                    (*values, now),
                )
                settings_id = int(cur.lastrowid)
            else:
                assignments = ", ".join(f"{c}=%s" for c in columns)
                cur.execute(
                    f"UPDATE check_in_settings SET {assignments}, updated_at=%s WHERE settings_id=%s",
                    (*values, now, int(settings.settings_id)),
                )
                settings_id = int(settings.settings_id)

        return settings.with_changes(settings_id=settings_id)


class MySQLAcademyLocationRepository(AcademyLocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[AcademyLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT location_id, name, address, latitude, longitude
                FROM academy_locations
                WHERE is_active=1
                ORDER BY location_id ASC
                """
            )
            return [
                AcademyLocation(
                    location_id=int(r["location_id"]),
                    name=r["name"],
                    address=r.get("address"),
                    latitude=float(r["latitude"]),
                    longitude=float(r["longitude"]),
                )
                for r in fetchall(cur)
            ]


def _to_session(r: dict) -> CheckInSession:
    return CheckInSession(
        check_in_id=int(r["check_in_id"]),
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        state=CheckInState(r["state"]),
        device_id=r.get("device_id"),
    )


class MySQLCheckInSessionRepository(CheckInSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def open(
        self,
        *,
        student_id: int,
        class_id: Optional[int],
        check_in_time: datetime,
        coordinates: Optional[Coordinates] = None,
        device_id: Optional[str] = None,
    ) -> CheckInSession:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO check_ins(student_id, class_id, check_in_time, state, latitude, longitude, device_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    int(class_id) if class_id is not None else None,
                    check_in_time,
                    CheckInState.CHECKED_IN.value,
                    coordinates.latitude if coordinates else None,
                    coordinates.longitude if coordinates else None,
                    device_id,
                ),
            )
            return CheckInSession(
                check_in_id=int(cur.lastrowid),
                student_id=int(student_id),
                class_id=class_id,
                check_in_time=check_in_time,
                state=CheckInState.CHECKED_IN,
                device_id=device_id,
            )

    def get_open_for_student(self, student_id: int) -> Optional[CheckInSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT check_in_id, student_id, class_id, check_in_time, check_out_time, state, device_id
                FROM check_ins
                WHERE student_id=%s AND state=%s
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (int(student_id), CheckInState.CHECKED_IN.value),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def close(self, *, check_in_id: int, check_out_time: datetime, state: CheckInState) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE check_ins
                SET state=%s, check_out_time=%s
                WHERE check_in_id=%s AND state=%s
                """,
                (state.value, check_out_time, int(check_in_id), CheckInState.CHECKED_IN.value),
            )
            return cur.rowcount > 0

    def close_open_before(self, *, cutoff: datetime, check_out_time: datetime, state: CheckInState) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE check_ins
                SET state=%s, check_out_time=%s
                WHERE state=%s AND check_in_time < %s
                """,
                (state.value, check_out_time, CheckInState.CHECKED_IN.value, cutoff),
            )
            return int(cur.rowcount or 0)
