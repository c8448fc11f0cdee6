"""
Allocation engine: capacity arithmetic, seating, removal and auto-assignment.

Every function here is pure. It takes a ``SeatingState`` and returns a new
one, or raises a ``SeatingError`` without having changed anything. Each
occupant, primary or companion, weighs exactly one seat.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from seatplan.core.errors import (
    AttendeeNotEligible,
    CapacityExceeded,
    DuplicateTable,
    TableNotFound,
)
from seatplan.schemas.attendee import Attendee
from seatplan.schemas.seating import (
    AutoAssignReport,
    CompanionOccupant,
    PrimaryOccupant,
    SeatingState,
    Table,
)

SEAT_WEIGHT = 1


def occupied_seats(table: Table) -> int:
    return SEAT_WEIGHT * len(table.occupants)


def available_seats(table: Table) -> int:
    return table.capacity - occupied_seats(table)


def is_eligible(attendee: Attendee, allow_pending: bool = True) -> bool:
    """Declined attendees are never seatable; pending ones only when allowed"""
    if attendee.confirmation is True:
        return True
    if attendee.confirmation is None:
        return allow_pending
    return False


def build_occupants(attendee: Attendee, table_id: str) -> Tuple:
    """One primary seat plus ``party_size - 1`` companions"""
    seated = attendee.model_copy(update={"table_id": table_id})
    companions = tuple(
        CompanionOccupant(owner=seated, ordinal=ordinal)
        for ordinal in range(1, attendee.party_size)
    )
    return (PrimaryOccupant(attendee=seated),) + companions


def find_table(tables: Iterable[Table], table_id: str) -> Table:
    for table in tables:
        if table.id == table_id:
            return table
    raise TableNotFound(table_id)


def locate(tables: Iterable[Table], attendee_id: str) -> Optional[Table]:
    """Table holding the attendee's party, if any"""
    for table in tables:
        if any(o.owner_id == attendee_id for o in table.occupants):
            return table
    return None


def owner_of(tables: Iterable[Table], occupant_id: str) -> Optional[str]:
    """Resolve a primary or companion seat id to the owning attendee id"""
    for table in tables:
        for occupant in table.occupants:
            if occupant.id == occupant_id:
                return occupant.owner_id
    return None


def seated_attendees(tables: Iterable[Table]) -> List[Attendee]:
    return [o.attendee for table in tables for o in table.primaries]


def _without_party(table: Table, attendee_id: str) -> Table:
    kept = tuple(o for o in table.occupants if o.owner_id != attendee_id)
    if len(kept) == len(table.occupants):
        return table
    return table.model_copy(update={"occupants": kept})


def _unseat(attendee: Attendee) -> Attendee:
    return attendee.model_copy(update={"table_id": None})


def assign(
    state: SeatingState,
    attendee: Attendee,
    table_id: str,
    allow_pending: bool = True,
) -> SeatingState:
    """Seat ``attendee`` and its companions at ``table_id``.

    The attendee is first lifted from any table it already occupies, so
    re-seating behaves like remove-then-assign. Seats the attendee already
    holds at the target table do not count against it.
    """
    if not is_eligible(attendee, allow_pending):
        raise AttendeeNotEligible(attendee.id, attendee.confirmation)

    target = find_table(state.tables, table_id)
    own_seats = SEAT_WEIGHT * sum(1 for o in target.occupants if o.owner_id == attendee.id)
    available = target.capacity - (occupied_seats(target) - own_seats)
    needed = SEAT_WEIGHT * attendee.party_size
    if needed > available:
        raise CapacityExceeded(available=available, needed=needed, table_id=table_id)

    new_occupants = build_occupants(attendee, table_id)
    tables = []
    for table in state.tables:
        table = _without_party(table, attendee.id)
        if table.id == table_id:
            table = table.model_copy(update={"occupants": table.occupants + new_occupants})
        tables.append(table)

    unassigned = tuple(a for a in state.unassigned if a.id != attendee.id)
    return SeatingState(tables=tuple(tables), unassigned=unassigned)


def remove(state: SeatingState, occupant_id: str) -> SeatingState:
    """Unseat the party owning ``occupant_id`` (a primary or companion id).

    The owning attendee goes back to the unassigned set; companions simply
    disappear. Removing someone who is not seated returns ``state`` itself.
    """
    attendee_id = owner_of(state.tables, occupant_id) or occupant_id
    owner = None
    changed = False
    tables = []
    for table in state.tables:
        for occupant in table.primaries:
            if occupant.owner_id == attendee_id:
                owner = occupant.attendee
        stripped = _without_party(table, attendee_id)
        changed = changed or stripped is not table
        tables.append(stripped)

    if not changed:
        return state

    unassigned = state.unassigned
    if owner is not None and all(a.id != owner.id for a in unassigned):
        unassigned = unassigned + (_unseat(owner),)
    return SeatingState(tables=tuple(tables), unassigned=unassigned)


def clear(state: SeatingState, remove_tables: bool = False) -> SeatingState:
    """Empty every table, sending primary occupants back to unassigned"""
    known = {a.id for a in state.unassigned}
    returned = []
    for attendee in seated_attendees(state.tables):
        if attendee.id not in known:
            known.add(attendee.id)
            returned.append(_unseat(attendee))

    if remove_tables:
        tables = ()
    else:
        tables = tuple(t.model_copy(update={"occupants": ()}) for t in state.tables)
    return SeatingState(tables=tables, unassigned=state.unassigned + tuple(returned))


def add_table(state: SeatingState, table: Table) -> SeatingState:
    if any(t.id == table.id for t in state.tables):
        raise DuplicateTable(table.id)
    empty = table.model_copy(update={"occupants": ()})
    return SeatingState(tables=state.tables + (empty,), unassigned=state.unassigned)


def move_table(state: SeatingState, table_id: str, x: float, y: float) -> SeatingState:
    target = find_table(state.tables, table_id)
    if target.x == x and target.y == y:
        return state
    tables = tuple(
        t.model_copy(update={"x": x, "y": y}) if t.id == table_id else t
        for t in state.tables
    )
    return SeatingState(tables=tables, unassigned=state.unassigned)


def best_fit(tables: Sequence[Table], party_size: int) -> Optional[Table]:
    """Table leaving the least unused space, earliest table on ties"""
    best = None
    best_waste = None
    for table in tables:
        remaining = available_seats(table)
        if remaining < party_size:
            continue
        waste = remaining - party_size
        if best_waste is None or waste < best_waste:
            best = table
            best_waste = waste
    return best


def auto_assign(state: SeatingState) -> Tuple[SeatingState, AutoAssignReport]:
    """Best-fit-decreasing pass over confirmed, unassigned attendees.

    Larger parties go first. An attendee that fits nowhere is reported as
    failed and the pass continues. This is a greedy heuristic, so an early
    choice can leave a later party without a table even when a different
    packing would have fit everyone.
    """
    candidates = [a for a in state.unassigned if a.confirmation is True]
    ordered = sorted(candidates, key=lambda a: a.party_size, reverse=True)

    placed = []
    failed = []
    placed_seats = 0
    for attendee in ordered:
        table = best_fit(state.tables, SEAT_WEIGHT * attendee.party_size)
        if table is None:
            failed.append(attendee)
            continue
        state = assign(state, attendee, table.id)
        placed.append(attendee.id)
        placed_seats += attendee.party_size

    report = AutoAssignReport(
        placed=tuple(placed),
        placed_seats=placed_seats,
        failed=tuple(failed),
    )
    return state, report


def unassigned_from(attendees: Iterable[Attendee], tables: Iterable[Table]) -> Tuple[Attendee, ...]:
    """Attendees that are not a primary occupant anywhere"""
    seated = {a.id for a in seated_attendees(tables)}
    return tuple(_unseat(a) for a in attendees if a.id not in seated)
