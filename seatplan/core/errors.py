"""
Seating error taxonomy.

None of these are fatal: the worst outcome of any of them is that local
changes are visible but not yet persisted.
"""

from typing import Any, Dict, Optional


class SeatingError(Exception):
    """Base class for recoverable seating errors"""

    error_code = "seating_error"
    status_code = 400

    def details(self) -> Dict[str, Any]:
        return {}


class CapacityExceeded(SeatingError):
    """The target table cannot hold the whole party"""

    error_code = "capacity_exceeded"

    def __init__(self, available: int, needed: int, table_id: Optional[str] = None):
        self.available = available
        self.needed = needed
        self.table_id = table_id
        if available <= 0:
            message = "Table is full"
        else:
            message = f"Table has {available} free seats but {needed} are needed"
        super().__init__(message)

    def details(self) -> Dict[str, Any]:
        return {"available": self.available, "needed": self.needed, "table_id": self.table_id}


class AttendeeNotEligible(SeatingError):
    """Declined attendees (and pending ones, when disallowed) cannot be seated"""

    error_code = "attendee_not_eligible"

    def __init__(self, attendee_id: str, confirmation: Optional[bool]):
        self.attendee_id = attendee_id
        self.confirmation = confirmation
        status = "declined" if confirmation is False else "pending"
        super().__init__(f"Attendee {attendee_id} is {status} and cannot be seated")

    def details(self) -> Dict[str, Any]:
        return {"attendee_id": self.attendee_id, "confirmation": self.confirmation}


class TableNotFound(SeatingError):
    error_code = "table_not_found"
    status_code = 404

    def __init__(self, table_id: str):
        self.table_id = table_id
        super().__init__(f"Table {table_id} not found")

    def details(self) -> Dict[str, Any]:
        return {"table_id": self.table_id}


class AttendeeNotFound(SeatingError):
    error_code = "attendee_not_found"
    status_code = 404

    def __init__(self, attendee_id: str):
        self.attendee_id = attendee_id
        super().__init__(f"Attendee {attendee_id} not found")

    def details(self) -> Dict[str, Any]:
        return {"attendee_id": self.attendee_id}


class DuplicateTable(SeatingError):
    error_code = "duplicate_table"
    status_code = 409

    def __init__(self, table_id: str):
        self.table_id = table_id
        super().__init__(f"Table {table_id} already exists")

    def details(self) -> Dict[str, Any]:
        return {"table_id": self.table_id}


class FetchFailure(SeatingError):
    """The attendee directory or the arrangement store could not be read"""

    error_code = "fetch_failure"
    status_code = 502

    def __init__(self, source: str, cause: Exception):
        self.source = source
        self.cause = cause
        super().__init__(f"Failed to fetch {source}: {cause}")

    def details(self) -> Dict[str, Any]:
        return {"source": self.source}


class SaveFailure(SeatingError):
    """Writing the arrangement failed; local state is kept"""

    error_code = "save_failure"
    status_code = 502

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Failed to save seating arrangement: {cause}")
