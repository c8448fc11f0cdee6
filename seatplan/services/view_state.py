"""
Local persistence of the map view (zoom and pan), separate from the arrangement.

Read and write failures are logged and otherwise ignored.
"""

import json
import logging
import os
from typing import Optional

from pydantic import ValidationError

from seatplan.schemas.seating import ViewState

logger = logging.getLogger(__name__)


class ViewStateStore:
    """Small keyed JSON blob on local disk"""

    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def load(self, key: str) -> Optional[ViewState]:
        try:
            raw = self._read_all().get(key)
            return ViewState.model_validate(raw) if raw else None
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Failed to load map view state: {e}")
            return None

    def save(self, key: str, view: ViewState) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable map view state: {e}")
            data = {}
        data[key] = view.model_dump()
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f)
        except OSError as e:
            logger.warning(f"Failed to save map view state: {e}")
