"""
Attendee schemas
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class Side(str, Enum):
    """Which side of the couple invited the attendee"""
    GROOM = "groom"
    BRIDE = "bride"
    SHARED = "shared"

STATUS_LABELS = {
    "confirmed": "Confirmed",
    "declined": "Declined",
    "pending": "Pending",
}

class Attendee(BaseModel):
    """An invited party, sourced from the attendee directory.

    ``party_size`` counts every seat the invitation consumes, companions
    included. ``confirmation`` is tri-state: ``True`` confirmed, ``False``
    declined, ``None`` pending.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: Optional[str] = None
    party_size: int = Field(default=1, ge=1)
    side: Side = Side.SHARED
    confirmation: Optional[bool] = None
    notes: str = ""
    group: Optional[str] = None
    table_id: Optional[str] = None

    @property
    def status(self) -> str:
        if self.confirmation is True:
            return "confirmed"
        if self.confirmation is False:
            return "declined"
        return "pending"

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]
