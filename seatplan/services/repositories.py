"""
Repository layer abstracting storage (SQLAlchemy vs Firebase Firestore).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from seatplan.core.config import settings
from seatplan.models import AttendeeModel, ArrangementModel, TableModel, AssignmentModel
from seatplan.services.firebase_client import event_document

logger = logging.getLogger(__name__)

METADATA_FIELDS = (
    "name",
    "description",
    "event_size_hint",
    "table_type",
    "board_width",
    "board_height",
    "is_default",
)


def use_firestore() -> bool:
    return settings.USE_FIREBASE is True


def _attendee_dict(attendee: AttendeeModel) -> Dict[str, Any]:
    return {
        "id": attendee.id,
        "name": attendee.name,
        "phone": attendee.phone,
        "party_size": attendee.party_size,
        "side": attendee.side,
        "confirmation": attendee.confirmation,
        "notes": attendee.notes or "",
        "group": attendee.group_name,
    }


# -------- Attendee repository --------

class AttendeeRepo:
    @staticmethod
    def list_sql(db: Session, event_id: str) -> List[Dict[str, Any]]:
        rows = db.query(AttendeeModel).filter(AttendeeModel.event_id == event_id).order_by(AttendeeModel.created_at, AttendeeModel.id).all()
        return [_attendee_dict(row) for row in rows]

    @staticmethod
    def create_sql(db: Session, event_id: str, name: str, **fields: Any) -> AttendeeModel:
        attendee = AttendeeModel(event_id=event_id, name=name, **fields)
        db.add(attendee)
        db.commit()
        db.refresh(attendee)
        return attendee

    # Firestore attendee docs under collection events/{event_id}/attendees
    @staticmethod
    def list_fs(event_id: str) -> List[Dict[str, Any]]:
        docs = event_document(event_id).collection("attendees").get()
        results: List[Dict[str, Any]] = []
        for d in docs:
            item = d.to_dict()
            item["id"] = d.id
            results.append(item)
        return results


# -------- Arrangement repository --------

class ArrangementRepo:
    @staticmethod
    def get_sql(db: Session, event_id: str) -> Optional[Dict[str, Any]]:
        arrangement = db.query(ArrangementModel).filter(ArrangementModel.event_id == event_id).first()
        if not arrangement:
            return None
        return {
            "metadata": {field: getattr(arrangement, field) for field in METADATA_FIELDS},
            "tables": ArrangementRepo._tables_sql(arrangement),
        }

    @staticmethod
    def _tables_sql(arrangement: ArrangementModel) -> List[Dict[str, Any]]:
        tables = []
        for table in arrangement.tables:
            guests = []
            for assignment in table.assignments:
                if assignment.attendee is None:
                    logger.warning(f"Dropping assignment of unknown attendee {assignment.attendee_id}")
                    continue
                guest = _attendee_dict(assignment.attendee)
                guest["attendee_id"] = guest.pop("id")
                guest["seat_number"] = assignment.seat_number
                guests.append(guest)
            tables.append({
                "id": table.table_key,
                "name": table.name,
                "capacity": table.capacity,
                "shape": table.shape,
                "x": table.x,
                "y": table.y,
                "guests": guests,
            })
        return tables

    @staticmethod
    def replace_sql(
        db: Session,
        event_id: str,
        metadata: Dict[str, Any],
        tables: List[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        """Replace the event's arrangement as a whole, in one transaction"""
        try:
            arrangement = db.query(ArrangementModel).filter(ArrangementModel.event_id == event_id).first()
            if not arrangement:
                arrangement = ArrangementModel(event_id=event_id)
                db.add(arrangement)

            for field in METADATA_FIELDS:
                if field in metadata:
                    setattr(arrangement, field, metadata[field])
            arrangement.updated_at = datetime.utcnow()

            arrangement.tables.clear()
            db.flush()

            for position, table in enumerate(tables):
                arrangement.tables.append(TableModel(
                    table_key=table["id"],
                    name=table["name"],
                    capacity=table["capacity"],
                    shape=table.get("shape") or "round",
                    x=table.get("x") or 0,
                    y=table.get("y") or 0,
                    position=position,
                    assignments=[
                        AssignmentModel(attendee_id=guest["attendee_id"], seat_number=guest.get("seat_number"))
                        for guest in table.get("guests", [])
                    ],
                ))

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(arrangement)
        return ArrangementRepo._tables_sql(arrangement)

    # Firestore shape: document events/{event_id}/seating/default
    @staticmethod
    def get_fs(event_id: str) -> Optional[Dict[str, Any]]:
        doc = event_document(event_id).collection("seating").document("default").get()
        return doc.to_dict() if doc.exists else None

    @staticmethod
    def replace_fs(
        event_id: str,
        metadata: Dict[str, Any],
        tables: List[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        data = {
            "metadata": metadata,
            "tables": tables,
            "updated_at": datetime.utcnow().isoformat(),
        }
        event_document(event_id).collection("seating").document("default").set(data)
        return tables
