"""
Tests for the allocation engine
"""

import pytest

from seatplan.core.errors import AttendeeNotEligible, CapacityExceeded, DuplicateTable, TableNotFound
from seatplan.schemas.seating import CompanionOccupant, PrimaryOccupant
from seatplan.services import allocation

from conftest import make_attendee, make_state, make_table

def assert_within_capacity(state):
    for table in state.tables:
        assert allocation.occupied_seats(table) <= table.capacity

class TestAssign:
    """Test manual seating"""

    def test_party_expands_into_primary_and_companions(self):
        guest = make_attendee("g1", party_size=3)
        state = make_state([make_table("t1", capacity=8)], [guest])

        state = allocation.assign(state, guest, "t1")

        table = state.tables[0]
        assert len(table.occupants) == 3
        assert isinstance(table.occupants[0], PrimaryOccupant)
        assert all(isinstance(o, CompanionOccupant) for o in table.occupants[1:])
        assert [o.id for o in table.occupants] == ["g1", "g1-companion-1", "g1-companion-2"]
        assert table.occupants[0].attendee.table_id == "t1"
        assert state.unassigned == ()

    def test_companions_inherit_confirmation(self):
        guest = make_attendee("g1", party_size=2, confirmation=None)
        state = allocation.assign(make_state([make_table("t1")], [guest]), guest, "t1")

        companion = state.tables[0].occupants[1]
        assert companion.is_companion
        assert companion.confirmation is None
        assert companion.owner_id == "g1"

    def test_capacity_scenario(self):
        """Capacity 8: a party of 3 leaves 5 seats, a party of 6 is rejected"""
        a = make_attendee("A", party_size=3)
        b = make_attendee("B", party_size=6)
        state = make_state([make_table("t1", capacity=8)], [a, b])

        state = allocation.assign(state, a, "t1")
        assert allocation.occupied_seats(state.tables[0]) == 3
        assert allocation.available_seats(state.tables[0]) == 5

        with pytest.raises(CapacityExceeded) as exc_info:
            allocation.assign(state, b, "t1")

        assert exc_info.value.available == 5
        assert exc_info.value.needed == 6
        assert len(state.tables[0].occupants) == 3
        assert [a.id for a in state.unassigned] == ["B"]

    def test_full_table_message(self):
        a = make_attendee("A", party_size=2)
        b = make_attendee("B")
        state = allocation.assign(make_state([make_table("t1", capacity=2)], [a, b]), a, "t1")

        with pytest.raises(CapacityExceeded, match="Table is full"):
            allocation.assign(state, b, "t1")

    def test_declined_rejected_before_capacity(self):
        declined = make_attendee("d1", party_size=20, confirmation=False)
        state = make_state([make_table("t1", capacity=4)], [declined])

        with pytest.raises(AttendeeNotEligible):
            allocation.assign(state, declined, "t1")

    def test_pending_policy(self):
        pending = make_attendee("p1", confirmation=None)
        state = make_state([make_table("t1")], [pending])

        seated = allocation.assign(state, pending, "t1", allow_pending=True)
        assert seated.tables[0].occupants[0].id == "p1"

        with pytest.raises(AttendeeNotEligible):
            allocation.assign(state, pending, "t1", allow_pending=False)

    def test_unknown_table(self):
        guest = make_attendee("g1")
        with pytest.raises(TableNotFound):
            allocation.assign(make_state([make_table("t1")], [guest]), guest, "nope")

    def test_reassign_moves_party(self):
        """Re-seating is remove-then-assign: never two tables at once"""
        guest = make_attendee("g1", party_size=2)
        state = make_state([make_table("t1"), make_table("t2")], [guest])

        state = allocation.assign(state, guest, "t1")
        state = allocation.assign(state, guest, "t2")

        assert state.tables[0].occupants == ()
        assert [o.id for o in state.tables[1].occupants] == ["g1", "g1-companion-1"]
        assert state.tables[1].occupants[0].attendee.table_id == "t2"
        assert state.unassigned == ()

    def test_reassign_same_table_ignores_own_seats(self):
        guest = make_attendee("g1", party_size=4)
        state = allocation.assign(make_state([make_table("t1", capacity=4)], [guest]), guest, "t1")

        state = allocation.assign(state, guest, "t1")

        assert len(state.tables[0].occupants) == 4
        assert_within_capacity(state)

    def test_original_state_untouched(self):
        guest = make_attendee("g1", party_size=2)
        before = make_state([make_table("t1")], [guest])

        allocation.assign(before, guest, "t1")

        assert before.tables[0].occupants == ()
        assert before.unassigned == (guest,)

class TestRemove:
    """Test unseating"""

    def test_remove_restores_empty_table(self):
        guest = make_attendee("g1", party_size=4)
        state = allocation.assign(make_state([make_table("t1")], [guest]), guest, "t1")

        state = allocation.remove(state, "g1")

        assert state.tables[0].occupants == ()
        assert len(state.unassigned) == 1
        assert state.unassigned[0].id == "g1"
        assert state.unassigned[0].table_id is None

    def test_remove_by_companion_id_removes_whole_party(self):
        guest = make_attendee("g1", party_size=3)
        other = make_attendee("g2")
        state = make_state([make_table("t1")], [guest, other])
        state = allocation.assign(state, guest, "t1")
        state = allocation.assign(state, other, "t1")

        state = allocation.remove(state, "g1-companion-2")

        assert [o.id for o in state.tables[0].occupants] == ["g2"]
        assert [a.id for a in state.unassigned] == ["g1"]

    def test_remove_not_seated_is_noop(self):
        guest = make_attendee("g1")
        state = make_state([make_table("t1")], [guest])

        assert allocation.remove(state, "g1") is state
        assert allocation.remove(state, "ghost") is state

    def test_companions_never_unassigned(self):
        guest = make_attendee("g1", party_size=5)
        state = allocation.assign(make_state([make_table("t1")], [guest]), guest, "t1")
        state = allocation.remove(state, "g1")

        assert all("companion" not in a.id for a in state.unassigned)

class TestClearAndTables:
    """Test clear, add and move"""

    def test_clear_returns_primaries_only(self):
        a = make_attendee("a", party_size=3)
        b = make_attendee("b", party_size=2)
        state = make_state([make_table("t1"), make_table("t2")], [a, b])
        state = allocation.assign(state, a, "t1")
        state = allocation.assign(state, b, "t2")

        cleared = allocation.clear(state)

        assert all(t.occupants == () for t in cleared.tables)
        assert len(cleared.tables) == 2
        assert sorted(x.id for x in cleared.unassigned) == ["a", "b"]

    def test_clear_can_remove_tables(self):
        a = make_attendee("a")
        state = allocation.assign(make_state([make_table("t1")], [a]), a, "t1")

        cleared = allocation.clear(state, remove_tables=True)

        assert cleared.tables == ()
        assert [x.id for x in cleared.unassigned] == ["a"]

    def test_add_table_rejects_duplicate_id(self):
        state = make_state([make_table("t1")])
        with pytest.raises(DuplicateTable):
            allocation.add_table(state, make_table("t1"))

        state = allocation.add_table(state, make_table("t2", capacity=10))
        assert [t.id for t in state.tables] == ["t1", "t2"]

    def test_move_table(self):
        state = make_state([make_table("t1")])

        moved = allocation.move_table(state, "t1", 300, 120)
        assert (moved.tables[0].x, moved.tables[0].y) == (300, 120)
        assert allocation.move_table(moved, "t1", 300, 120) is moved

class TestAutoAssign:
    """Test best-fit-decreasing auto assignment"""

    def test_two_table_scenario(self):
        six = make_attendee("six", party_size=6)
        three = make_attendee("three", party_size=3)
        state = make_state([make_table("small", capacity=4), make_table("large", capacity=10)], [three, six])

        state, report = allocation.auto_assign(state)

        assert report.placed_count == 2
        assert report.placed_seats == 9
        assert report.failed == ()
        assert allocation.locate(state.tables, "six").id == "large"
        assert allocation.locate(state.tables, "three").id == "small"
        assert state.unassigned == ()

    def test_only_confirmed_are_candidates(self, attendees):
        state = make_state([make_table("t1", capacity=20)], attendees)

        state, report = allocation.auto_assign(state)

        assert set(report.placed) == {"a1", "a2", "a3"}
        assert sorted(a.id for a in state.unassigned) == ["a4", "a5"]

    def test_failures_partition_input(self):
        guests = [make_attendee(f"g{i}", party_size=size) for i, size in enumerate([5, 4, 3, 3, 2])]
        state = make_state([make_table("t1", capacity=6), make_table("t2", capacity=6)], guests)

        state, report = allocation.auto_assign(state)

        placed = set(report.placed)
        failed = {a.id for a in report.failed}
        assert placed | failed == {g.id for g in guests}
        assert placed & failed == set()
        assert_within_capacity(state)
        assert {a.id for a in state.unassigned} == failed

    def test_ties_go_to_earliest_table(self):
        guest = make_attendee("g1", party_size=2)
        state = make_state([make_table("t1", capacity=4), make_table("t2", capacity=4)], [guest])

        state, _ = allocation.auto_assign(state)

        assert allocation.locate(state.tables, "g1").id == "t1"

    def test_deterministic(self, attendees):
        tables = [make_table("t1", capacity=5), make_table("t2", capacity=6)]

        first, first_report = allocation.auto_assign(make_state(tables, attendees))
        second, second_report = allocation.auto_assign(make_state(tables, attendees))

        assert first == second
        assert first_report == second_report

    def test_nothing_to_place(self):
        state = make_state([make_table("t1")], [make_attendee("p", confirmation=None)])

        new_state, report = allocation.auto_assign(state)

        assert new_state is state
        assert report.placed == () and report.failed == ()

def test_unassigned_from_excludes_seated():
    a = make_attendee("a")
    b = make_attendee("b")
    state = allocation.assign(make_state([make_table("t1")], [a, b]), a, "t1")

    assert [x.id for x in allocation.unassigned_from([a, b], state.tables)] == ["b"]
