"""
Shared fixtures: in-memory adapters and attendee builders
"""

import pytest

from seatplan.core.errors import FetchFailure
from seatplan.schemas.attendee import Attendee, Side
from seatplan.schemas.seating import ArrangementDocument, SaveResult, SeatingState, Table
from seatplan.services.scheduler import ManualScheduler
from seatplan.services.session import ArrangementSession

def make_attendee(attendee_id, party_size=1, confirmation=True, **fields):
    fields.setdefault("name", f"Guest {attendee_id}")
    fields.setdefault("side", Side.SHARED)
    return Attendee(id=attendee_id, party_size=party_size, confirmation=confirmation, **fields)

def make_table(table_id, capacity=8, **fields):
    fields.setdefault("name", f"Table {table_id}")
    return Table(id=table_id, capacity=capacity, **fields)

def make_state(tables=(), unassigned=()):
    return SeatingState(tables=tuple(tables), unassigned=tuple(unassigned))

class FakeDirectory:
    """Attendee directory returning a fixed list"""

    def __init__(self, attendees=None, fail=False):
        self.attendees = list(attendees or [])
        self.fail = fail
        self.calls = 0

    async def fetch_attendees(self, event_id):
        self.calls += 1
        if self.fail:
            raise FetchFailure("attendees", ConnectionError("directory offline"))
        return list(self.attendees)

class FakeStore:
    """Arrangement store keeping documents in memory and recording every save"""

    def __init__(self, document=None):
        self.document = document
        self.saves = []
        self.fail = False
        self.fail_fetch = False
        self.during_save = None

    async def fetch_arrangement(self, event_id):
        if self.fail_fetch:
            raise FetchFailure("arrangement", ConnectionError("store offline"))
        return self.document

    async def save_arrangement(self, event_id, metadata, tables):
        if self.during_save is not None:
            hook, self.during_save = self.during_save, None
            hook()
        if self.fail:
            raise ConnectionError("store offline")
        self.saves.append({"event_id": event_id, "metadata": metadata, "tables": list(tables)})
        self.document = ArrangementDocument(metadata=metadata, tables=list(tables))
        return SaveResult(
            tables=list(tables),
            message=f"Seating arrangement saved successfully with {len(tables)} tables",
        )

@pytest.fixture
def scheduler():
    return ManualScheduler()

@pytest.fixture
def attendees():
    """A small guest list: two confirmed couples, a family of four, one pending, one declined"""
    return [
        make_attendee("a1", party_size=2, name="Dana Levi", phone="0501111111", side=Side.BRIDE, group="family"),
        make_attendee("a2", party_size=2, name="Yossi Cohen", phone="0502222222", side=Side.GROOM, group="work"),
        make_attendee("a3", party_size=4, name="Miriam Katz", phone="0503333333", side=Side.BRIDE, group="family"),
        make_attendee("a4", party_size=1, confirmation=None, name="Avi Ben", phone="0504444444", side=Side.GROOM),
        make_attendee("a5", party_size=3, confirmation=False, name="Noa Shani", side=Side.SHARED),
    ]

@pytest.fixture
def directory(attendees):
    return FakeDirectory(attendees)

@pytest.fixture
def store():
    return FakeStore()

@pytest.fixture
def make_session(directory, store, scheduler):
    """Build an unloaded session over the fake adapters"""
    def factory(**options):
        options.setdefault("quiet_period", 2.0)
        options.setdefault("view_delay", 0.5)
        options.setdefault("allow_pending", True)
        return ArrangementSession("evt-1", directory, store, scheduler, **options)
    return factory
