"""
Seating arrangement models
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, ForeignKey
from sqlalchemy.orm import relationship

from seatplan.core.db import Base

class ArrangementModel(Base):
    __tablename__ = "arrangements"
    
    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="Main seating arrangement")
    description = Column(String(1000), default="")
    event_size_hint = Column(Integer, default=0)
    table_type = Column(String(20), default="custom")
    board_width = Column(Float, default=700)
    board_height = Column(Float, default=600)
    is_default = Column(Boolean, default=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    tables = relationship(
        "TableModel",
        back_populates="arrangement",
        cascade="all, delete-orphan",
        order_by="TableModel.position",
    )

class TableModel(Base):
    __tablename__ = "seating_tables"
    
    id = Column(Integer, primary_key=True, index=True)
    arrangement_id = Column(Integer, ForeignKey("arrangements.id"), nullable=False)
    table_key = Column(String(100), nullable=False)  # client-side table id, unique per arrangement
    name = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False)
    shape = Column(String(20), default="round")
    x = Column(Float, default=0)
    y = Column(Float, default=0)
    position = Column(Integer, nullable=False, default=0)  # creation order
    
    # Relationships
    arrangement = relationship("ArrangementModel", back_populates="tables")
    assignments = relationship(
        "AssignmentModel",
        back_populates="table",
        cascade="all, delete-orphan",
        order_by="AssignmentModel.id",
    )

class AssignmentModel(Base):
    __tablename__ = "table_assignments"
    
    id = Column(Integer, primary_key=True, index=True)
    table_id = Column(Integer, ForeignKey("seating_tables.id"), nullable=False)
    attendee_id = Column(String(64), ForeignKey("attendees.id"), nullable=False)
    seat_number = Column(Integer, nullable=True)
    assigned_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    table = relationship("TableModel", back_populates="assignments")
    attendee = relationship("AttendeeModel")
