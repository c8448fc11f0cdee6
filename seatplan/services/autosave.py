"""
Debounced, change-detecting auto-save of an arrangement session
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from seatplan.core.errors import SaveFailure
from seatplan.services.scheduler import Scheduler, TimerHandle

if TYPE_CHECKING:
    from seatplan.services.arrangement_store import ArrangementStore
    from seatplan.services.session import ArrangementSession

logger = logging.getLogger(__name__)


class SaveState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"


class AutoSavePipeline:
    """Idle -> Pending -> Saving -> Idle.

    Every ``schedule`` call restarts the quiet-period timer, so a burst of
    edits collapses into a single write. When the timer fires, the session's
    current state is snapshotted and written unless its fingerprint matches
    the last successful save. A failed write leaves local state untouched and
    is not retried until the next edit schedules another save.
    """

    def __init__(
        self,
        session: "ArrangementSession",
        store: "ArrangementStore",
        scheduler: Scheduler,
        quiet_period: float,
        notify: Optional[Callable[[str, str], None]] = None,
    ):
        self._session = session
        self._store = store
        self._scheduler = scheduler
        self.quiet_period = quiet_period
        self._notify = notify or (lambda level, message: None)

        self.state = SaveState.IDLE
        self.last_saved_fingerprint: Optional[str] = None
        self.last_saved_at: Optional[datetime] = None
        self.last_error: Optional[SaveFailure] = None
        self.write_count = 0

        self._timer: Optional[TimerHandle] = None
        self._rerun = False

    @property
    def is_saving(self) -> bool:
        return self.state is SaveState.SAVING

    def mark_saved(self, fingerprint: str) -> None:
        """Record ``fingerprint`` as already persisted (e.g. right after loading)"""
        self.last_saved_fingerprint = fingerprint

    def schedule(self) -> None:
        """Restart the quiet period after a qualifying mutation"""
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._scheduler.call_later(self.quiet_period, self._on_quiet_period)
        if self.state is not SaveState.SAVING:
            self.state = SaveState.PENDING

    def _on_quiet_period(self) -> None:
        self._timer = None
        if self.state is SaveState.SAVING:
            # Picked up as soon as the write in flight finishes
            self._rerun = True
            return
        self._scheduler.spawn(self.flush())

    async def flush(self) -> bool:
        """Write the current arrangement now. Returns True if a write was attempted."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.state is SaveState.SAVING:
            self._rerun = True
            return False
        if self._session.error is not None:
            logger.warning(f"Not saving arrangement {self._session.event_id}: {self._session.error}")
            self.state = SaveState.IDLE
            return False

        snapshot = self._session.snapshot()
        if snapshot.fingerprint == self.last_saved_fingerprint:
            logger.debug(f"Arrangement {self._session.event_id} unchanged, skipping save")
            self.state = SaveState.IDLE
            return False

        self.state = SaveState.SAVING
        logger.info(f"Saving arrangement {self._session.event_id} ({len(snapshot.tables)} tables)")
        try:
            result = await self._store.save_arrangement(
                self._session.event_id, snapshot.metadata, snapshot.tables
            )
        except Exception as exc:
            self.last_error = SaveFailure(exc)
            logger.error(f"Error saving seating arrangement {self._session.event_id}: {exc}")
            self._notify("error", "Failed to save the seating arrangement. Please try again.")
        else:
            self.write_count += 1
            self.last_saved_at = datetime.utcnow()
            self.last_error = None
            self.last_saved_fingerprint = snapshot.fingerprint
            if self._session.apply_saved(result, snapshot):
                # The store's answer replaced local tables; that is what is saved now
                self.last_saved_fingerprint = self._session.snapshot().fingerprint
            self._notify("success", result.message or "Seating arrangement saved")

        self.state = SaveState.PENDING if self._timer is not None else SaveState.IDLE
        if self._rerun:
            self._rerun = False
            await self.flush()
        return True
