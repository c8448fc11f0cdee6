"""
Arrangement store adapter: reads and writes whole arrangements
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from seatplan.core.db import SessionLocal
from seatplan.core.errors import FetchFailure
from seatplan.schemas.seating import (
    ArrangementDocument,
    ArrangementMetadata,
    BoardDimensions,
    SaveResult,
    WireTable,
)
from seatplan.services.concurrency import run_blocking
from seatplan.services.repositories import ArrangementRepo, use_firestore

logger = logging.getLogger(__name__)


def metadata_to_row(metadata: ArrangementMetadata) -> Dict[str, Any]:
    return {
        "name": metadata.name,
        "description": metadata.description,
        "event_size_hint": metadata.event_size_hint,
        "table_type": metadata.table_type,
        "board_width": metadata.board.width,
        "board_height": metadata.board.height,
        "is_default": metadata.is_default,
    }


def metadata_from_row(row: Dict[str, Any]) -> ArrangementMetadata:
    defaults = ArrangementMetadata()
    return ArrangementMetadata(
        name=row.get("name") or defaults.name,
        description=row.get("description") or "",
        event_size_hint=row.get("event_size_hint") or 0,
        table_type=row.get("table_type") or defaults.table_type,
        board=BoardDimensions(
            width=row.get("board_width") or defaults.board.width,
            height=row.get("board_height") or defaults.board.height,
        ),
        is_default=row.get("is_default", True),
    )


class ArrangementStore:
    """Stateless request/response wrapper over the arrangement repositories"""

    def __init__(self, session_factory: Callable = SessionLocal):
        self._session_factory = session_factory

    def _load(self, event_id: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return ArrangementRepo.get_fs(event_id)
        with self._session_factory() as db:
            return ArrangementRepo.get_sql(db, event_id)

    def _replace(self, event_id: str, metadata: Dict[str, Any], tables: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if use_firestore():
            return ArrangementRepo.replace_fs(event_id, metadata, tables)
        with self._session_factory() as db:
            return ArrangementRepo.replace_sql(db, event_id, metadata, tables)

    async def fetch_arrangement(self, event_id: str) -> Optional[ArrangementDocument]:
        """The persisted arrangement, or None if the event has none yet"""
        try:
            raw = await run_blocking(self._load, event_id)
            if not raw:
                return None
            metadata = raw.get("metadata")
            return ArrangementDocument(
                metadata=metadata_from_row(metadata) if metadata else None,
                tables=[WireTable.model_validate(t) for t in raw.get("tables") or []],
            )
        except Exception as exc:
            logger.error(f"Error fetching seating arrangement for {event_id}: {exc}")
            raise FetchFailure("arrangement", exc) from exc

    async def save_arrangement(
        self,
        event_id: str,
        metadata: ArrangementMetadata,
        tables: Sequence[WireTable],
    ) -> SaveResult:
        """Persist the whole arrangement; raises on any storage error"""
        payload = [t.model_dump(mode="json") for t in tables]
        saved = await run_blocking(self._replace, event_id, metadata_to_row(metadata), payload)
        return SaveResult(
            tables=[WireTable.model_validate(t) for t in saved],
            message=f"Seating arrangement saved successfully with {len(saved)} tables",
        )
