"""
Request bodies for the seating API
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field

from seatplan.schemas.seating import Shape

class AssignRequest(BaseModel):
    """Seat an attendee at a table"""
    attendee_id: str
    table_id: str

class ClearRequest(BaseModel):
    """Empty every table; optionally delete the tables too"""
    remove_tables: bool = False

class AddTableRequest(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    shape: Optional[Shape] = None
    x: Optional[float] = None
    y: Optional[float] = None

class MoveTableRequest(BaseModel):
    x: float
    y: float

class LayoutRequest(BaseModel):
    """Generate a fresh table layout for the event"""
    guest_count: int = Field(ge=0)
    table_type: Literal["regular", "knight", "mix", "custom"] = "regular"
    custom_capacity: Optional[int] = Field(default=None, gt=0)
    knight_tables_count: Optional[int] = Field(default=None, ge=0)

class ViewUpdate(BaseModel):
    zoom: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None
