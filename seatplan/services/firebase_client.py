"""
Firestore access for the seating backend
"""

from __future__ import annotations

import base64
import json
import logging
import os
from functools import lru_cache
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore

from seatplan.core.config import Settings, settings

logger = logging.getLogger(__name__)

APP_NAME = "seatplan"


def load_service_account(config: Settings = settings) -> dict[str, Any]:
    """Service-account info from inline JSON, base64 JSON or a key file, in that order"""
    if config.FIREBASE_CREDENTIALS_JSON:
        return json.loads(config.FIREBASE_CREDENTIALS_JSON)
    if config.FIREBASE_CREDENTIALS_B64:
        return json.loads(base64.b64decode(config.FIREBASE_CREDENTIALS_B64).decode("utf-8"))
    if config.FIREBASE_CREDENTIALS_FILE and os.path.exists(config.FIREBASE_CREDENTIALS_FILE):
        with open(config.FIREBASE_CREDENTIALS_FILE, "r", encoding="utf-8") as f:
            return json.load(f)
    raise RuntimeError(
        "Firebase credentials not provided. Set FIREBASE_CREDENTIALS_JSON, "
        "FIREBASE_CREDENTIALS_B64 or FIREBASE_CREDENTIALS_FILE"
    )


@lru_cache(maxsize=1)
def get_firestore_client():
    """Cached Firestore client, or None when the SQL backend is configured"""
    if not settings.USE_FIREBASE:
        return None

    try:
        app = firebase_admin.get_app(APP_NAME)
    except ValueError:
        cred = credentials.Certificate(load_service_account())
        app = firebase_admin.initialize_app(cred, name=APP_NAME)
        logger.info(f"Firebase app initialized for project {app.project_id}")

    return firestore.client(app)


def event_document(event_id: str):
    """``events/{event_id}``; attendees and the seating document hang off it"""
    return get_firestore_client().collection("events").document(event_id)
