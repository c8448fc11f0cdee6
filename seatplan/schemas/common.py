"""
Response envelopes shared by every route
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel

from seatplan.core.errors import SeatingError

class StandardResponse(BaseModel):
    """Standard API response"""
    success: bool
    message: str
    data: Optional[Any] = None

class ErrorResponse(BaseModel):
    """Error response schema"""
    success: bool = False
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None

    @classmethod
    def from_error(cls, exc: SeatingError) -> "ErrorResponse":
        details: Dict[str, Any] = exc.details()
        return cls(message=str(exc), error_code=exc.error_code, details=details or None)
