"""
WebSocket manager for real-time seating updates
"""

import json
import logging
from typing import Any, Dict, List
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

class WebSocketManager:
    """Manages WebSocket connections, one room per event"""

    def __init__(self):
        # event_id -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, event_id: str):
        """Accept WebSocket connection and add to event room"""
        await websocket.accept()
        self.active_connections.setdefault(event_id, []).append(websocket)
        logger.info(f"WebSocket connected to event {event_id}. Total connections: {len(self.active_connections[event_id])}")

    def disconnect(self, websocket: WebSocket, event_id: str):
        """Remove WebSocket connection from event room"""
        connections = self.active_connections.get(event_id)
        if not connections or websocket not in connections:
            return
        connections.remove(websocket)
        logger.info(f"WebSocket disconnected from event {event_id}. Remaining connections: {len(connections)}")

        # Clean up empty rooms
        if not connections:
            del self.active_connections[event_id]

    async def send_personal_message(self, message: dict, websocket: WebSocket):
        """Send message to specific WebSocket"""
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.error(f"Error sending personal message: {e}")

    async def broadcast_to_event(self, event_id: str, message: dict):
        """Broadcast message to all WebSockets connected to an event"""
        # Copy so disconnects during iteration are safe
        connections = list(self.active_connections.get(event_id, []))

        disconnected = []
        for websocket in connections:
            try:
                await websocket.send_text(json.dumps(message))
            except Exception as e:
                logger.error(f"Error broadcasting to websocket: {e}")
                disconnected.append(websocket)

        for websocket in disconnected:
            self.disconnect(websocket, event_id)

    async def publish(self, event: Dict[str, Any]):
        """Session listener: forward a seating domain event to its room"""
        event_id = event.get("payload", {}).get("event_id")
        if event_id is None:
            logger.warning(f"Dropping seating event without event_id: {event.get('action')}")
            return
        await self.broadcast_to_event(str(event_id), event)

    def get_connection_count(self, event_id: str) -> int:
        """Get number of active connections for an event"""
        return len(self.active_connections.get(event_id, []))

    def get_all_connection_counts(self) -> Dict[str, int]:
        """Get connection counts for all events"""
        return {
            event_id: len(connections)
            for event_id, connections in self.active_connections.items()
        }

# Global WebSocket manager instance
websocket_manager = WebSocketManager()

# Router for WebSocket endpoints
router = APIRouter()

@router.websocket("/events/{event_id}")
async def websocket_endpoint(websocket: WebSocket, event_id: str):
    """WebSocket endpoint for real-time seating updates"""
    await websocket_manager.connect(websocket, event_id)

    try:
        welcome_message = {
            "type": "connection",
            "message": f"Connected to seating for event {event_id}",
            "event_id": event_id,
            "connection_count": websocket_manager.get_connection_count(event_id)
        }
        await websocket_manager.send_personal_message(welcome_message, websocket)

        # Keep connection alive and answer heartbeats
        while True:
            data = await websocket.receive_text()
            try:
                client_message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON received from WebSocket: {data}")
                continue

            if isinstance(client_message, dict) and client_message.get("type") == "ping":
                pong_message = {
                    "type": "pong",
                    "timestamp": client_message.get("timestamp")
                }
                await websocket_manager.send_personal_message(pong_message, websocket)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        websocket_manager.disconnect(websocket, event_id)

@router.get("/stats")
async def websocket_stats():
    """Get WebSocket connection statistics (for debugging)"""
    counts = websocket_manager.get_all_connection_counts()
    return {
        "total_events_with_connections": len(counts),
        "connection_counts": counts,
        "total_connections": sum(counts.values())
    }
