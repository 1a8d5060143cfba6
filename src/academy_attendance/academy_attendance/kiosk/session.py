from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from typing import Any, Callable, Optional, Protocol, Sequence

from ..attendance.model import RecentCheckIn
from ..attendance.service import AttendanceLedger
from ..checkin.settings import CheckInSettingsStore
from ..common.datetime_utils import now_local
from ..core.constants import DASHBOARD_REFRESH_SECONDS, KIOSK_RECENT_LIMIT, KIOSK_REFRESH_SECONDS
from ..core.exceptions import RemoteWriteError, ValidationError

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> Any:
        """Run callback once after delay; the returned handle has `cancel()`."""

        raise NotImplementedError


class TimerScheduler:
    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        return timer


class KioskSession:
    """Kiosk mode flag plus the timer-driven "today's check-ins" feed.

    Kiosk mode is only available while `kiosk_mode_enabled` is set in the
    check-in settings.

    Polling only, no push. Each start/stop bumps a generation counter; a fetch
    that finishes under an older generation is dropped, so a torn-down view
    never receives data.
    """

    def __init__(
        self,
        ledger: AttendanceLedger,
        settings: CheckInSettingsStore,
        *,
        kiosk_refresh_seconds: int = KIOSK_REFRESH_SECONDS,
        dashboard_refresh_seconds: int = DASHBOARD_REFRESH_SECONDS,
        recent_limit: int = KIOSK_RECENT_LIMIT,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        if kiosk_refresh_seconds >= dashboard_refresh_seconds:
            raise ValueError("kiosk refresh must be shorter than the dashboard refresh")

        self._ledger = ledger
        self._settings = settings
        self._kiosk_refresh = kiosk_refresh_seconds
        self._dashboard_refresh = dashboard_refresh_seconds
        self._recent_limit = int(recent_limit)
        self._scheduler = scheduler or TimerScheduler()
        self._clock = clock

        self._lock = threading.Lock()
        self._generation = 0
        self._timer = None
        self.kiosk_mode = False
        self.polling = False
        self.recent: Sequence[RecentCheckIn] = ()
        self.last_error: Optional[str] = None

    @property
    def refresh_seconds(self) -> int:
        return self._kiosk_refresh if self.kiosk_mode else self._dashboard_refresh

    @property
    def welcome_message(self) -> str:
        return self._settings.current.welcome_message

    def watch(self) -> None:
        """Start polling at the dashboard cadence."""
        self._restart(kiosk_mode=False)

    def enter_kiosk_mode(self) -> None:
        if not self._settings.current.kiosk_mode_enabled:
            raise ValidationError("Kiosk mode is disabled in check-in settings")
        self._restart(kiosk_mode=True)

    def exit_kiosk_mode(self) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._generation += 1
            self.kiosk_mode = False
            self.polling = False
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def refresh(self) -> Sequence[RecentCheckIn]:
        with self._lock:
            generation = self._generation
        return self._fetch(generation)

    def _restart(self, *, kiosk_mode: bool) -> None:
        self.close()
        with self._lock:
            self.kiosk_mode = kiosk_mode
            self.polling = True
            generation = self._generation
        self._fetch(generation)
        self._schedule(generation)

    def _schedule(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = self._scheduler.schedule(self.refresh_seconds, lambda: self._tick(generation))

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
        self._fetch(generation)
        self._schedule(generation)

    def _fetch(self, generation: int) -> Sequence[RecentCheckIn]:
        today: date = self._clock().date()
        try:
            rows = self._ledger.recent_checkins(today, limit=self._recent_limit)
        except RemoteWriteError as exc:
            logger.warning("recent check-ins refresh failed: %s", exc)
            with self._lock:
                if generation == self._generation:
                    self.last_error = str(exc)
            return self.recent

        newest_first = tuple(sorted(rows, key=lambda r: r.created_at, reverse=True)[: self._recent_limit])
        with self._lock:
            if generation != self._generation:
                return self.recent
            self.recent = newest_first
            self.last_error = None
        return newest_first
