"""
Conversions between live tables and their persisted form
"""

import hashlib
import json
import logging
from typing import Iterable, List, Sequence, Tuple

from seatplan.core.errors import SeatingError
from seatplan.schemas.attendee import Attendee
from seatplan.schemas.seating import ArrangementMetadata, SeatingState, Table, WireGuest, WireTable
from seatplan.services import allocation

logger = logging.getLogger(__name__)


def to_wire_tables(tables: Iterable[Table]) -> List[WireTable]:
    """Strip companions; only primary occupants reach storage"""
    wire = []
    for table in tables:
        guests = [
            WireGuest.from_attendee(occupant.attendee, seat_number=occupant.seat_number)
            for occupant in table.primaries
        ]
        wire.append(WireTable(
            id=table.id,
            name=table.name,
            capacity=table.capacity,
            shape=table.shape,
            x=table.x,
            y=table.y,
            guests=guests,
        ))
    return wire


def hydrate(
    wire_tables: Sequence[WireTable],
    attendees: Sequence[Attendee],
) -> Tuple[SeatingState, List[Attendee]]:
    """Rebuild live tables, regenerating companions from party sizes.

    Directory records win over the copy stored with the table. Parties that no
    longer fit (declined since, or grown past the table's capacity) are left
    unassigned and returned as the second element.
    """
    directory = {a.id: a for a in attendees}
    tables = tuple(
        Table(id=w.id, name=w.name, capacity=w.capacity, shape=w.shape, x=w.x, y=w.y)
        for w in wire_tables
    )
    state = SeatingState(tables=tables, unassigned=allocation.unassigned_from(attendees, ()))

    dropped = []
    for wire_table in wire_tables:
        for guest in wire_table.guests:
            attendee = directory.get(guest.attendee_id) or guest.to_attendee()
            try:
                state = allocation.assign(state, attendee, wire_table.id, allow_pending=True)
            except SeatingError as exc:
                logger.warning(f"Could not restore {attendee.id} at table {wire_table.id}: {exc}")
                dropped.append(attendee)
    return state, dropped


def fingerprint(
    metadata: ArrangementMetadata,
    wire_tables: Sequence[WireTable],
    unassigned_ids: Sequence[str],
) -> str:
    """Stable digest of everything a save would write"""
    body = {
        "metadata": metadata.model_dump(mode="json"),
        "tables": [t.model_dump(mode="json") for t in wire_tables],
        "unassigned": sorted(unassigned_ids),
    }
    encoded = json.dumps(body, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
