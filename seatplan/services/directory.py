"""
Attendee directory adapter: reads the event's guest list and normalizes it
"""

import logging
from typing import Any, Callable, Dict, List, Mapping

from seatplan.core.db import SessionLocal
from seatplan.core.errors import FetchFailure
from seatplan.schemas.attendee import Attendee, Side
from seatplan.services.concurrency import run_blocking
from seatplan.services.repositories import AttendeeRepo, use_firestore

logger = logging.getLogger(__name__)

# Labels used by the guest-list screens, in both languages
SIDE_ALIASES: Dict[str, Side] = {
    "groom": Side.GROOM,
    "חתן": Side.GROOM,
    "bride": Side.BRIDE,
    "כלה": Side.BRIDE,
    "shared": Side.SHARED,
    "משותף": Side.SHARED,
}


def _first(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def normalize_attendee(raw: Mapping[str, Any]) -> Attendee:
    """Map a raw directory record onto ``Attendee``.

    Accepts both the snake_case shape of this service and the camelCase shape
    of the guest-list API (``_id``, ``numberOfGuests``, ``isConfirmed`` ...).
    Party size defaults to 1; anything else that is malformed raises.
    """
    attendee_id = _first(raw, "id", "_id")
    if attendee_id is None:
        raise ValueError("Attendee record without an id")

    side = str(_first(raw, "side", default="shared")).strip().lower()
    if side not in SIDE_ALIASES:
        raise ValueError(f"Unknown side: {side!r}")

    confirmation = _first(raw, "confirmation", "isConfirmed")
    if confirmation not in (True, False, None):
        raise ValueError(f"Invalid confirmation value: {confirmation!r}")

    return Attendee(
        id=str(attendee_id),
        name=str(_first(raw, "name", default="")).strip(),
        phone=_first(raw, "phone", "phoneNumber"),
        party_size=int(_first(raw, "party_size", "numberOfGuests", default=1) or 1),
        side=SIDE_ALIASES[side],
        confirmation=confirmation,
        notes=_first(raw, "notes", default="") or "",
        group=_first(raw, "group", "group_name"),
    )


class AttendeeDirectory:
    """Stateless adapter over the attendee repositories"""

    def __init__(self, session_factory: Callable = SessionLocal):
        self._session_factory = session_factory

    def _load(self, event_id: str) -> List[Dict[str, Any]]:
        if use_firestore():
            return AttendeeRepo.list_fs(event_id)
        with self._session_factory() as db:
            return AttendeeRepo.list_sql(db, event_id)

    async def fetch_attendees(self, event_id: str) -> List[Attendee]:
        try:
            rows = await run_blocking(self._load, event_id)
            attendees = [normalize_attendee(row) for row in rows]
        except Exception as exc:
            logger.error(f"Error fetching attendees for {event_id}: {exc}")
            raise FetchFailure("attendees", exc) from exc
        logger.info(f"Loaded {len(attendees)} attendees for event {event_id}")
        return attendees
