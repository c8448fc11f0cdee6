"""
Arrangement session: the live, in-memory seating state of one event
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from seatplan.core.config import settings
from seatplan.core.errors import AttendeeNotFound, FetchFailure, SeatingError
from seatplan.schemas.attendee import Attendee
from seatplan.schemas.seating import (
    ArrangementMetadata,
    AutoAssignReport,
    LayoutResult,
    SaveResult,
    SeatingEvent,
    SeatingFilters,
    SeatingState,
    Table,
    TableTypePolicy,
    ViewState,
    WireTable,
)
from seatplan.services import allocation, serialization
from seatplan.services.autosave import AutoSavePipeline
from seatplan.services.layout_service import create_new_table, generate_layout
from seatplan.services.scheduler import Scheduler, TimerHandle
from seatplan.services.view_state import ViewStateStore

logger = logging.getLogger(__name__)

KNIGHT_TABLE_MIN_CAPACITY = 17

Listener = Callable[[Dict[str, Any]], Any]


@dataclass(frozen=True)
class ArrangementSnapshot:
    """What a save would write, as of ``revision``"""
    revision: int
    metadata: ArrangementMetadata
    tables: List[WireTable]
    unassigned_ids: Tuple[str, ...]
    fingerprint: str


class ArrangementSession:
    """Owns one event's tables and unassigned attendees.

    All mutations go through the allocation engine, bump ``revision``, emit a
    seating domain event and schedule an auto-save. Mutations never wait on a
    save in flight.
    """

    def __init__(
        self,
        event_id: str,
        directory,
        store,
        scheduler: Scheduler,
        view_store: Optional[ViewStateStore] = None,
        quiet_period: Optional[float] = None,
        view_delay: Optional[float] = None,
        allow_pending: Optional[bool] = None,
    ):
        self.event_id = event_id
        self._directory = directory
        self._store = store
        self._scheduler = scheduler
        self._view_store = view_store
        self.view_delay = settings.VIEW_STATE_DELAY if view_delay is None else view_delay
        self.allow_pending = settings.ALLOW_PENDING_ASSIGNMENT if allow_pending is None else allow_pending

        self.state = SeatingState()
        self.metadata = ArrangementMetadata()
        self.filters = SeatingFilters()
        self.view = ViewState()
        self.revision = 0
        self.is_loaded = False
        self.load_failure: Optional[FetchFailure] = None
        self.saved_tables: List[WireTable] = []
        self.notifications: Deque[Dict[str, str]] = deque(maxlen=20)

        self._listeners: List[Listener] = []
        self._view_timer: Optional[TimerHandle] = None

        quiet = settings.AUTOSAVE_QUIET_PERIOD if quiet_period is None else quiet_period
        self.autosave = AutoSavePipeline(self, store, scheduler, quiet, notify=self._notify)

    # -------- state accessors --------

    @property
    def tables(self) -> Tuple[Table, ...]:
        return self.state.tables

    @property
    def unassigned(self) -> Tuple[Attendee, ...]:
        return self.state.unassigned

    @property
    def error(self) -> Optional[str]:
        return str(self.load_failure) if self.load_failure else None

    @property
    def view_key(self) -> str:
        return f"seating-map-view:{self.event_id}"

    def all_attendees(self) -> List[Attendee]:
        return list(self.state.unassigned) + allocation.seated_attendees(self.state.tables)

    def find_attendee(self, attendee_id: str) -> Attendee:
        for attendee in self.all_attendees():
            if attendee.id == attendee_id:
                return attendee
        raise AttendeeNotFound(attendee_id)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # -------- loading --------

    async def load(self) -> None:
        """Fetch attendees and the saved arrangement, then rebuild live state.

        A fetch failure sets ``error`` and falls back to what could be read; it
        is never raised to the caller. While ``error`` is set the session is
        read-only and nothing is written to the store. Calling ``load`` again
        retries both fetches.
        """
        if self._view_store is not None:
            self.view = self._view_store.load(self.view_key) or ViewState()

        self.load_failure = None
        try:
            attendees = await self._directory.fetch_attendees(self.event_id)
        except FetchFailure as exc:
            self.load_failure = exc
            attendees = []

        try:
            document = await self._store.fetch_arrangement(self.event_id)
        except FetchFailure as exc:
            self.load_failure = exc
            document = None

        if document is not None:
            self.saved_tables = list(document.tables)
            if document.metadata is not None:
                self.metadata = document.metadata
            # Without the directory, seated guests come from their stored copies
            self.state, dropped = serialization.hydrate(document.tables, attendees)
            if dropped:
                logger.warning(f"{len(dropped)} saved assignments could not be restored for {self.event_id}")
            self.autosave.mark_saved(self.snapshot().fingerprint)
        else:
            self.state = SeatingState(unassigned=allocation.unassigned_from(attendees, ()))

        self.is_loaded = True
        if self.load_failure is not None:
            logger.warning(f"Session {self.event_id} is read-only until reloaded: {self.load_failure}")
        logger.info(
            f"Session {self.event_id} loaded: {len(self.tables)} tables, "
            f"{len(self.unassigned)} unassigned"
        )

    def ensure_writable(self) -> None:
        """Raise the load failure; a partially loaded arrangement must not be saved over the stored one"""
        if self.load_failure is not None:
            raise self.load_failure

    # -------- mutations --------

    def _commit(self, state: SeatingState, action: str, payload: Dict[str, Any]) -> bool:
        if state is self.state:
            return False
        self.ensure_writable()
        self.state = state
        self.revision += 1
        self._emit(action, payload)
        self.autosave.schedule()
        return True

    def assign(self, attendee_id: str, table_id: str) -> SeatingState:
        """Seat an attendee (and companions); raises on capacity or eligibility"""
        attendee = self.find_attendee(attendee_id)
        try:
            state = allocation.assign(self.state, attendee, table_id, allow_pending=self.allow_pending)
        except SeatingError as exc:
            logger.info(f"Rejected seating {attendee_id} at {table_id}: {exc}")
            raise
        self._commit(state, "update", {"type": "assign", "attendee_id": attendee_id, "table_id": table_id})
        return self.state

    def remove(self, occupant_id: str) -> SeatingState:
        """Unseat the party owning ``occupant_id``; a no-op if not seated"""
        state = allocation.remove(self.state, occupant_id)
        self._commit(state, "update", {"type": "remove", "occupant_id": occupant_id})
        return self.state

    def auto_assign(self) -> AutoAssignReport:
        state, report = allocation.auto_assign(self.state)
        self._commit(state, "update", {
            "type": "auto_assign",
            "placed": list(report.placed),
            "failed": [a.id for a in report.failed],
        })
        if not report.placed and not report.failed:
            self._notify("info", "No confirmed guests to seat automatically")
        elif report.failed:
            self._notify(
                "warning",
                f"Auto-assign seated {report.placed_count} parties; "
                f"{len(report.failed)} could not be seated (no room)",
            )
        else:
            self._notify(
                "success",
                f"Auto-assign seated all {report.placed_count} parties ({report.placed_seats} seats)",
            )
        return report

    def clear_all(self, remove_tables: bool = False) -> SeatingState:
        """Send every seated party back to unassigned. Not undoable."""
        state = allocation.clear(self.state, remove_tables=remove_tables)
        self._commit(state, "update", {"type": "clear", "remove_tables": remove_tables})
        return self.state

    def add_table(self, **overrides) -> Table:
        table = create_new_table(self.state.tables, **overrides)
        self._commit(allocation.add_table(self.state, table), "add", {"type": "table", "table_id": table.id})
        return table

    def move_table(self, table_id: str, x: float, y: float) -> Table:
        self._commit(
            allocation.move_table(self.state, table_id, x, y),
            "update",
            {"type": "move_table", "table_id": table_id, "x": x, "y": y},
        )
        return allocation.find_table(self.state.tables, table_id)

    def generate_layout(self, guest_count: int, policy: TableTypePolicy) -> LayoutResult:
        """Replace all tables with a generated layout; seated parties return to unassigned"""
        self.ensure_writable()
        result = generate_layout(guest_count, policy)
        cleared = allocation.clear(self.state, remove_tables=True)
        self.metadata = self.metadata.model_copy(update={
            "event_size_hint": guest_count,
            "table_type": policy.table_type,
            "board": result.board,
        })
        state = SeatingState(tables=result.tables, unassigned=cleared.unassigned)
        self._commit(state, "update", {"type": "layout", "table_count": len(result.tables)})
        return result

    # -------- filters, statistics, view --------

    def set_filters(self, **changes) -> SeatingFilters:
        updates = {key: value for key, value in changes.items() if value is not None}
        self.filters = SeatingFilters(**{**self.filters.model_dump(), **updates})
        return self.filters

    def filtered_unassigned(self) -> List[Attendee]:
        query = self.filters.search_query.strip().lower()
        results = []
        for attendee in self.state.unassigned:
            if query and query not in attendee.name.lower() and query not in (attendee.phone or ""):
                continue
            if self.filters.side != "all" and attendee.side.value != self.filters.side:
                continue
            if self.filters.status != "all" and attendee.status != self.filters.status:
                continue
            results.append(attendee)
        return results

    def confirmed_guests_count(self) -> int:
        return sum(a.party_size for a in self.all_attendees() if a.confirmation is True)

    def available_groups(self) -> List[str]:
        return sorted({a.group for a in self.all_attendees() if a.confirmation is True and a.group})

    def statistics(self) -> Dict[str, Any]:
        total_capacity = sum(t.capacity for t in self.state.tables)
        seated = sum(allocation.occupied_seats(t) for t in self.state.tables)
        return {
            "total_tables": len(self.state.tables),
            "total_seated_guests": seated,
            "total_capacity": total_capacity,
            "knight_tables": sum(1 for t in self.state.tables if t.capacity >= KNIGHT_TABLE_MIN_CAPACITY),
            "occupancy_rate": (seated / total_capacity) * 100 if total_capacity > 0 else 0,
            "confirmed_guests": self.confirmed_guests_count(),
            "unassigned_parties": len(self.state.unassigned),
            "available_groups": self.available_groups(),
        }

    def set_view(self, zoom: Optional[float] = None, x: Optional[float] = None, y: Optional[float] = None) -> ViewState:
        """Update zoom/pan; written to the view store after a short delay"""
        current = self.view.model_dump()
        updates = {key: value for key, value in (("zoom", zoom), ("x", x), ("y", y)) if value is not None}
        self.view = ViewState(**{**current, **updates})
        if self._view_store is not None:
            if self._view_timer is not None:
                self._view_timer.cancel()
            self._view_timer = self._scheduler.call_later(self.view_delay, self._write_view)
        return self.view

    def _write_view(self) -> None:
        self._view_timer = None
        self._view_store.save(self.view_key, self.view)

    # -------- persistence hooks used by the auto-save pipeline --------

    def snapshot(self) -> ArrangementSnapshot:
        metadata = self.metadata.model_copy(update={
            "event_size_hint": self.metadata.event_size_hint or len(self.all_attendees()),
        })
        tables = serialization.to_wire_tables(self.state.tables)
        unassigned_ids = tuple(a.id for a in self.state.unassigned)
        return ArrangementSnapshot(
            revision=self.revision,
            metadata=metadata,
            tables=tables,
            unassigned_ids=unassigned_ids,
            fingerprint=serialization.fingerprint(metadata, tables, unassigned_ids),
        )

    def apply_saved(self, result: SaveResult, snapshot: ArrangementSnapshot) -> bool:
        """Take the store's answer into the cache.

        Live tables are replaced only if nothing changed since ``snapshot``;
        otherwise local edits stand and the next save cycle carries them.
        """
        self.saved_tables = list(result.tables)
        if self.revision != snapshot.revision:
            return False
        state, dropped = serialization.hydrate(result.tables, self.all_attendees())
        if dropped:
            logger.warning(f"{len(dropped)} assignments rejected while reconciling {self.event_id}")
        self.state = state
        return True

    async def save_now(self) -> bool:
        return await self.autosave.flush()

    # -------- outward notifications --------

    def _emit(self, action: str, payload: Dict[str, Any]) -> None:
        event = SeatingEvent(action=action, payload={"event_id": self.event_id, **payload}).model_dump()
        for listener in self._listeners:
            try:
                result = listener(event)
            except Exception as exc:
                logger.error(f"Seating listener failed: {exc}")
                continue
            if inspect.isawaitable(result):
                self._scheduler.spawn(result)

    def _notify(self, level: str, message: str) -> None:
        self.notifications.append({
            "level": level,
            "message": message,
            "timestamp": datetime.utcnow().isoformat(),
        })

    # -------- presentation --------

    def to_dict(self) -> Dict[str, Any]:
        autosave = self.autosave
        return {
            "event_id": self.event_id,
            "revision": self.revision,
            "error": self.error,
            "metadata": self.metadata.model_dump(mode="json"),
            "tables": [_table_dict(t) for t in self.state.tables],
            "unassigned": [_attendee_dict(a) for a in self.filtered_unassigned()],
            "unassigned_total": len(self.state.unassigned),
            "filters": self.filters.model_dump(),
            "view": self.view.model_dump(),
            "autosave": {
                "state": autosave.state.value,
                "last_saved_at": autosave.last_saved_at.isoformat() if autosave.last_saved_at else None,
                "last_error": str(autosave.last_error) if autosave.last_error else None,
            },
            "notifications": list(self.notifications),
        }


def _attendee_dict(attendee: Attendee) -> Dict[str, Any]:
    data = attendee.model_dump(mode="json")
    data["status"] = attendee.status
    data["status_label"] = attendee.status_label
    return data


def _table_dict(table: Table) -> Dict[str, Any]:
    occupied = allocation.occupied_seats(table)
    return {
        "id": table.id,
        "name": table.name,
        "capacity": table.capacity,
        "shape": table.shape.value,
        "x": table.x,
        "y": table.y,
        "occupied": occupied,
        "available": table.capacity - occupied,
        "occupants": [
            {
                "id": o.id,
                "owner_id": o.owner_id,
                "name": o.name,
                "is_companion": o.is_companion,
                "confirmation": o.confirmation,
            }
            for o in table.occupants
        ],
    }


class SessionRegistry:
    """One live session per event, created and loaded on first use"""

    def __init__(self, directory, store, scheduler: Scheduler, view_store: Optional[ViewStateStore] = None, **session_options):
        self._directory = directory
        self._store = store
        self._scheduler = scheduler
        self._view_store = view_store
        self._options = session_options
        self._sessions: Dict[str, ArrangementSession] = {}
        self._listeners: List[Listener] = []
        self._lock = asyncio.Lock()

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)
        for session in self._sessions.values():
            session.add_listener(listener)

    async def get(self, event_id: str) -> ArrangementSession:
        async with self._lock:
            session = self._sessions.get(event_id)
            if session is None:
                session = ArrangementSession(
                    event_id,
                    self._directory,
                    self._store,
                    self._scheduler,
                    view_store=self._view_store,
                    **self._options,
                )
                for listener in self._listeners:
                    session.add_listener(listener)
                await session.load()
                self._sessions[event_id] = session
            elif session.error is not None:
                # Read-only after a failed load, so there are no local edits to lose
                logger.info(f"Retrying load of session {event_id}")
                await session.load()
            return session

    async def flush_all(self) -> None:
        """Write every session with unsaved edits (used on shutdown)"""
        for session in list(self._sessions.values()):
            await session.save_now()
