"""
Attendee model (directory rows; maintained by the guest-list system)
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime

from seatplan.core.db import Base

class AttendeeModel(Base):
    __tablename__ = "attendees"
    
    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    event_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    party_size = Column(Integer, nullable=False, default=1)
    side = Column(String(20), nullable=False, default="shared")  # groom, bride, shared
    confirmation = Column(Boolean, nullable=True)  # NULL means pending
    notes = Column(String(1000), default="")
    group_name = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
