"""
Seating schemas: occupants, tables, arrangement metadata and wire shapes
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from seatplan.schemas.attendee import Attendee, Side

class Shape(str, Enum):
    """Table shape; cosmetic only"""
    ROUND = "round"
    RECTANGULAR = "rectangular"

class PrimaryOccupant(BaseModel):
    """The seat carrying an attendee's real identity"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["primary"] = "primary"
    attendee: Attendee
    seat_number: Optional[int] = None

    @property
    def id(self) -> str:
        return self.attendee.id

    @property
    def owner_id(self) -> str:
        return self.attendee.id

    @property
    def name(self) -> str:
        return self.attendee.name

    @property
    def is_companion(self) -> bool:
        return False

    @property
    def confirmation(self) -> Optional[bool]:
        return self.attendee.confirmation

class CompanionOccupant(BaseModel):
    """A synthesized extra seat for the rest of an attendee's party"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["companion"] = "companion"
    owner: Attendee
    ordinal: int = Field(ge=1)

    @property
    def id(self) -> str:
        return f"{self.owner.id}-companion-{self.ordinal}"

    @property
    def owner_id(self) -> str:
        return self.owner.id

    @property
    def name(self) -> str:
        return f"Companion of {self.owner.name}"

    @property
    def is_companion(self) -> bool:
        return True

    @property
    def confirmation(self) -> Optional[bool]:
        return self.owner.confirmation

Occupant = Annotated[Union[PrimaryOccupant, CompanionOccupant], Field(discriminator="kind")]

class Table(BaseModel):
    """A physical table and the seats taken at it"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    capacity: int = Field(gt=0)
    shape: Shape = Shape.ROUND
    x: float = 0
    y: float = 0
    occupants: Tuple[Occupant, ...] = ()

    @property
    def primaries(self) -> List[PrimaryOccupant]:
        return [o for o in self.occupants if not o.is_companion]

class SeatingState(BaseModel):
    """Tables plus the attendees not seated at any of them"""
    model_config = ConfigDict(frozen=True)

    tables: Tuple[Table, ...] = ()
    unassigned: Tuple[Attendee, ...] = ()

class AutoAssignReport(BaseModel):
    """Outcome of one auto-assign pass"""
    model_config = ConfigDict(frozen=True)

    placed: Tuple[str, ...] = ()
    placed_seats: int = 0
    failed: Tuple[Attendee, ...] = ()

    @property
    def placed_count(self) -> int:
        return len(self.placed)

class BoardDimensions(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float = 700
    height: float = 600

class TableTypePolicy(BaseModel):
    """How many tables of which size the layout generator produces"""
    table_type: Literal["regular", "knight", "mix", "custom"] = "regular"
    custom_capacity: Optional[int] = Field(default=None, gt=0)
    knight_tables_count: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_custom_capacity(self):
        if self.table_type == "custom" and self.custom_capacity is None:
            raise ValueError("custom table type requires custom_capacity")
        return self

class LayoutResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    tables: Tuple[Table, ...]
    board: BoardDimensions

class ArrangementMetadata(BaseModel):
    """Everything persisted alongside the tables"""
    model_config = ConfigDict(frozen=True)

    name: str = "Main seating arrangement"
    description: str = "Seating arrangement created by the user"
    event_size_hint: int = 0
    table_type: str = "custom"
    board: BoardDimensions = BoardDimensions()
    is_default: bool = True

class SeatingFilters(BaseModel):
    """UI-facing filters over the unassigned list"""
    model_config = ConfigDict(frozen=True)

    search_query: str = ""
    side: Literal["all", "groom", "bride", "shared"] = "all"
    status: Literal["all", "confirmed", "pending", "declined"] = "all"

class ViewState(BaseModel):
    """Map zoom and pan position"""
    model_config = ConfigDict(frozen=True)

    zoom: float = 1.0
    x: float = 0
    y: float = 0

    @field_validator("zoom")
    @classmethod
    def clamp_zoom(cls, value: float) -> float:
        return min(max(value, 0.3), 3.0)

# -------- Wire shapes --------
# Tables on the wire carry primary occupants only.

class WireGuest(BaseModel):
    attendee_id: str
    name: str = ""
    phone: Optional[str] = None
    party_size: int = Field(default=1, ge=1)
    side: Side = Side.SHARED
    confirmation: Optional[bool] = None
    notes: str = ""
    group: Optional[str] = None
    seat_number: Optional[int] = None

    @classmethod
    def from_attendee(cls, attendee: Attendee, seat_number: Optional[int] = None) -> "WireGuest":
        return cls(
            attendee_id=attendee.id,
            name=attendee.name,
            phone=attendee.phone,
            party_size=attendee.party_size,
            side=attendee.side,
            confirmation=attendee.confirmation,
            notes=attendee.notes,
            group=attendee.group,
            seat_number=seat_number,
        )

    def to_attendee(self) -> Attendee:
        return Attendee(
            id=self.attendee_id,
            name=self.name,
            phone=self.phone,
            party_size=self.party_size,
            side=self.side,
            confirmation=self.confirmation,
            notes=self.notes,
            group=self.group,
        )

class WireTable(BaseModel):
    id: str
    name: str
    capacity: int = Field(gt=0)
    shape: Shape = Shape.ROUND
    x: float = 0
    y: float = 0
    guests: List[WireGuest] = []

class ArrangementDocument(BaseModel):
    """A persisted arrangement as read back from the store"""
    metadata: Optional[ArrangementMetadata] = None
    tables: List[WireTable] = []

class SaveResult(BaseModel):
    """The store's authoritative answer to a save"""
    tables: List[WireTable] = []
    message: Optional[str] = None

class SeatingEvent(BaseModel):
    """Domain event emitted to collaboration channels"""
    domain: Literal["seating"] = "seating"
    action: Literal["update", "add"]
    payload: Dict[str, Any] = {}
