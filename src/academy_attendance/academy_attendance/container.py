from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Callable, ContextManager, Optional

from .attendance.bulk import BulkMarkingService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.roster import RosterResolver
from .attendance.service import AttendanceLedger
from .checkin.gate import CheckInGate
from .checkin.lifecycle import CheckInLifecycleService
from .checkin.mysql_checkin_repository import (
    MySQLAcademyLocationRepository,
    MySQLCheckInSessionRepository,
    MySQLCheckInSettingsRepository,
)
from .checkin.repository import AcademyLocationRepository, CheckInSessionRepository, CheckInSettingsRepository
from .checkin.rules.factory import CheckInRuleFactory
from .checkin.settings import CheckInSettingsStore
from .classes.mysql_class_repository import MySQLClassRepository, MySQLReservationRepository
from .classes.repository import ClassRepository, ReservationRepository
from .classes.service import ClassService
from .common.datetime_utils import now_local
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_base import db_transaction
from .stats.service import StatsService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class AppOptions:
    kiosk_refresh_seconds: int = constants.KIOSK_REFRESH_SECONDS
    dashboard_refresh_seconds: int = constants.DASHBOARD_REFRESH_SECONDS
    kiosk_recent_limit: int = constants.KIOSK_RECENT_LIMIT
    pin_max_failed_attempts: int = constants.PIN_MAX_FAILED_ATTEMPTS
    pin_lockout_seconds: int = constants.PIN_LOCKOUT_SECONDS
    pin_pad_idle_seconds: int = constants.PIN_PAD_IDLE_SECONDS
    monthly_goal_percent: int = constants.DEFAULT_MONTHLY_GOAL_PERCENT

    @classmethod
    def from_settings(cls, settings) -> "AppOptions":
        """Read overrides from a config module; missing names keep the defaults."""
        defaults = cls()
        return cls(
            kiosk_refresh_seconds=int(getattr(settings, "KIOSK_REFRESH_SECONDS", defaults.kiosk_refresh_seconds)),
            dashboard_refresh_seconds=int(
                getattr(settings, "DASHBOARD_REFRESH_SECONDS", defaults.dashboard_refresh_seconds)
            ),
            kiosk_recent_limit=int(getattr(settings, "KIOSK_RECENT_LIMIT", defaults.kiosk_recent_limit)),
            pin_max_failed_attempts=int(getattr(settings, "PIN_MAX_FAILED_ATTEMPTS", defaults.pin_max_failed_attempts)),
            pin_lockout_seconds=int(getattr(settings, "PIN_LOCKOUT_SECONDS", defaults.pin_lockout_seconds)),
            pin_pad_idle_seconds=int(getattr(settings, "PIN_PAD_IDLE_SECONDS", defaults.pin_pad_idle_seconds)),
            monthly_goal_percent=int(getattr(settings, "MONTHLY_GOAL_PERCENT", defaults.monthly_goal_percent)),
        )


@dataclass(frozen=True)
class Container:
    options: AppOptions

    students_repo: StudentRepository
    classes_repo: ClassRepository
    reservations_repo: ReservationRepository
    attendance_repo: AttendanceRepository
    settings_repo: CheckInSettingsRepository
    locations_repo: AcademyLocationRepository
    sessions_repo: CheckInSessionRepository

    student_service: StudentService
    class_service: ClassService
    roster_resolver: RosterResolver
    ledger: AttendanceLedger
    bulk_service: BulkMarkingService
    stats_service: StatsService
    settings_store: CheckInSettingsStore
    lifecycle_service: CheckInLifecycleService
    checkin_gate: CheckInGate

    conn: Optional[DatabaseConnection] = None
    clock: Callable[[], datetime] = now_local


def assemble(
    *,
    students_repo: StudentRepository,
    classes_repo: ClassRepository,
    reservations_repo: ReservationRepository,
    attendance_repo: AttendanceRepository,
    settings_repo: CheckInSettingsRepository,
    locations_repo: AcademyLocationRepository,
    sessions_repo: CheckInSessionRepository,
    options: Optional[AppOptions] = None,
    clock: Callable[[], datetime] = now_local,
    conn: Optional[DatabaseConnection] = None,
    transaction: Optional[Callable[[], ContextManager]] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL or in-memory)."""

    options = options or AppOptions()
    if transaction is None:
        transaction = partial(db_transaction, conn) if conn is not None else nullcontext

    student_service = StudentService(students_repo)
    class_service = ClassService(classes_repo)
    roster_resolver = RosterResolver(classes_repo, reservations_repo, students_repo, attendance_repo)
    ledger = AttendanceLedger(attendance_repo, students_repo, classes_repo, roster_resolver, clock=clock)
    bulk_service = BulkMarkingService(attendance_repo, students_repo, classes_repo, clock=clock)
    stats_service = StatsService(ledger, goal_percent=options.monthly_goal_percent)

    settings_store = CheckInSettingsStore(settings_repo, clock=clock)
    settings_store.reload()
    lifecycle_service = CheckInLifecycleService(sessions_repo, settings_store, clock=clock)
    checkin_gate = CheckInGate(
        students_repo,
        class_service,
        ledger,
        settings_store,
        lifecycle_service,
        rule_factory=CheckInRuleFactory(locations_repo),
        transaction=transaction,
        clock=clock,
    )

    return Container(
        options=options,
        students_repo=students_repo,
        classes_repo=classes_repo,
        reservations_repo=reservations_repo,
        attendance_repo=attendance_repo,
        settings_repo=settings_repo,
        locations_repo=locations_repo,
        sessions_repo=sessions_repo,
        student_service=student_service,
        class_service=class_service,
        roster_resolver=roster_resolver,
        ledger=ledger,
        bulk_service=bulk_service,
        stats_service=stats_service,
        settings_store=settings_store,
        lifecycle_service=lifecycle_service,
        checkin_gate=checkin_gate,
        conn=conn,
        clock=clock,
    )


def build_container(*, db_config: dict, options: Optional[AppOptions] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        students_repo=MySQLStudentRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        reservations_repo=MySQLReservationRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        settings_repo=MySQLCheckInSettingsRepository(conn),
        locations_repo=MySQLAcademyLocationRepository(conn),
        sessions_repo=MySQLCheckInSessionRepository(conn),
        options=options,
        conn=conn,
    )
