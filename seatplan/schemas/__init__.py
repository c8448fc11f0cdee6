"""
Pydantic schemas package
"""

from .common import *
from .attendee import *
from .seating import *
from .requests import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "Side",
    "Attendee",
    "Shape",
    "PrimaryOccupant",
    "CompanionOccupant",
    "Occupant",
    "Table",
    "SeatingState",
    "AutoAssignReport",
    "BoardDimensions",
    "TableTypePolicy",
    "LayoutResult",
    "ArrangementMetadata",
    "SeatingFilters",
    "ViewState",
    "WireGuest",
    "WireTable",
    "ArrangementDocument",
    "SaveResult",
    "SeatingEvent",
    "AssignRequest",
    "ClearRequest",
    "AddTableRequest",
    "MoveTableRequest",
    "LayoutRequest",
    "ViewUpdate",
]
