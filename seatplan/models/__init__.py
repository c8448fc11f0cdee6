"""
Database models package
"""

from .attendee import AttendeeModel
from .arrangement import ArrangementModel, TableModel, AssignmentModel

__all__ = ["AttendeeModel", "ArrangementModel", "TableModel", "AssignmentModel"]
