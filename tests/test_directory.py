"""
Tests for attendee record normalization
"""

import pytest

from seatplan.schemas.attendee import Side
from seatplan.services.directory import normalize_attendee

def test_snake_case_record():
    attendee = normalize_attendee({
        "id": "a1",
        "name": "  Dana Levi ",
        "phone": "0501111111",
        "party_size": 3,
        "side": "bride",
        "confirmation": True,
        "notes": "vegetarian",
        "group": "family",
    })

    assert attendee.id == "a1"
    assert attendee.name == "Dana Levi"
    assert attendee.party_size == 3
    assert attendee.side == Side.BRIDE
    assert attendee.status == "confirmed"
    assert attendee.table_id is None

def test_camel_case_record():
    attendee = normalize_attendee({
        "_id": 42,
        "name": "Yossi Cohen",
        "phoneNumber": "0502222222",
        "numberOfGuests": 2,
        "side": "חתן",
        "isConfirmed": None,
    })

    assert attendee.id == "42"
    assert attendee.phone == "0502222222"
    assert attendee.party_size == 2
    assert attendee.side == Side.GROOM
    assert attendee.status == "pending"
    assert attendee.status_label == "Pending"

def test_defaults():
    attendee = normalize_attendee({"id": "x", "name": "Solo"})

    assert attendee.party_size == 1
    assert attendee.side == Side.SHARED
    assert attendee.confirmation is None
    assert attendee.notes == ""

def test_declined():
    attendee = normalize_attendee({"id": "x", "name": "No", "side": "Shared", "confirmation": False})

    assert attendee.status == "declined"
    assert attendee.status_label == "Declined"

@pytest.mark.parametrize("raw", [
    {"name": "No id"},
    {"id": "x", "name": "Bad side", "side": "neighbours"},
    {"id": "x", "name": "Bad status", "confirmation": "maybe"},
])
def test_malformed_records_raise(raw):
    with pytest.raises(ValueError):
        normalize_attendee(raw)

def test_party_size_must_be_positive():
    with pytest.raises(ValueError):
        normalize_attendee({"id": "x", "name": "Nobody", "party_size": -2})
