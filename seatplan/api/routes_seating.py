"""
Seating API routes - one live arrangement session per event
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pydantic import ValidationError

from seatplan.core.errors import SeatingError
from seatplan.schemas.requests import (
    AddTableRequest,
    AssignRequest,
    ClearRequest,
    LayoutRequest,
    MoveTableRequest,
    ViewUpdate,
)
from seatplan.schemas.seating import TableTypePolicy
from seatplan.services.concurrency import run_blocking
from seatplan.services.export_service import ExportService
from seatplan.services.session import SessionRegistry
from seatplan.utils.responses import success_response, error_response, seating_error_response

logger = logging.getLogger(__name__)

router = APIRouter()

def get_registry(request: Request) -> SessionRegistry:
    """Session registry created by the application lifespan"""
    return request.app.state.registry

@router.get("/{event_id}")
async def get_seating(
    event_id: str,
    search_query: Optional[str] = None,
    side: Optional[str] = None,
    status: Optional[str] = None,
    registry: SessionRegistry = Depends(get_registry)
):
    """Get tables, filtered unassigned attendees and save status"""
    session = await registry.get(event_id)
    try:
        session.set_filters(search_query=search_query, side=side, status=status)
    except ValidationError as e:
        return error_response(
            message="Invalid filter",
            details=[err["msg"] for err in e.errors()],
            status_code=422
        )

    return success_response(
        message="Seating arrangement retrieved",
        data=session.to_dict()
    )

@router.post("/{event_id}/assign")
async def assign_attendee(
    event_id: str,
    body: AssignRequest,
    registry: SessionRegistry = Depends(get_registry)
):
    """Seat an attendee and their companions at a table"""
    session = await registry.get(event_id)
    try:
        session.assign(body.attendee_id, body.table_id)
    except SeatingError as e:
        return seating_error_response(e)

    return success_response(
        message="Guest assigned to table",
        data=session.to_dict()
    )

@router.delete("/{event_id}/assign/{occupant_id}")
async def remove_attendee(
    event_id: str,
    occupant_id: str,
    registry: SessionRegistry = Depends(get_registry)
):
    """Return a seated party (by primary or companion id) to the unassigned list"""
    session = await registry.get(event_id)
    try:
        session.remove(occupant_id)
    except SeatingError as e:
        return seating_error_response(e)

    return success_response(
        message="Guest removed from table",
        data=session.to_dict()
    )

@router.post("/{event_id}/auto-assign")
async def auto_assign(
    event_id: str,
    registry: SessionRegistry = Depends(get_registry)
):
    """Seat every confirmed, unassigned party that fits somewhere"""
    session = await registry.get(event_id)
    try:
        report = session.auto_assign()
    except SeatingError as e:
        return seating_error_response(e)

    return success_response(
        message=f"Auto-assigned {report.placed_count} guests",
        data={
            "placed": list(report.placed),
            "placed_seats": report.placed_seats,
            "failed": [a.id for a in report.failed],
            "seating": session.to_dict()
        }
    )

@router.post("/{event_id}/clear")
async def clear_all(
    event_id: str,
    body: Optional[ClearRequest] = None,
    registry: SessionRegistry = Depends(get_registry)
):
    """Unseat everyone; optionally delete all tables too"""
    session = await registry.get(event_id)
    remove_tables = body.remove_tables if body else False
    try:
        session.clear_all(remove_tables=remove_tables)
    except SeatingError as e:
        return seating_error_response(e)

    return success_response(
        message="All tables cleared" if not remove_tables else "All tables removed",
        data=session.to_dict()
    )

@router.post("/{event_id}/tables")
async def add_table(
    event_id: str,
    body: Optional[AddTableRequest] = None,
    registry: SessionRegistry = Depends(get_registry)
):
    """Add an empty table, defaults filled in for anything not given"""
    session = await registry.get(event_id)
    overrides = body.model_dump(exclude_none=True) if body else {}
    try:
        table = session.add_table(**overrides)
    except SeatingError as e:
        return seating_error_response(e)

    return success_response(
        message=f"Table {table.name} added",
        data=session.to_dict(),
        status_code=201
    )

@router.patch("/{event_id}/tables/{table_id}/position")
async def move_table(
    event_id: str,
    table_id: str,
    body: MoveTableRequest,
    registry: SessionRegistry = Depends(get_registry)
):
    """Move a table on the map"""
    session = await registry.get(event_id)
    try:
        table = session.move_table(table_id, body.x, body.y)
    except SeatingError as e:
        return seating_error_response(e)

    return success_response(
        message="Table moved",
        data={"id": table.id, "x": table.x, "y": table.y}
    )

@router.post("/{event_id}/layout")
async def generate_layout(
    event_id: str,
    body: LayoutRequest,
    registry: SessionRegistry = Depends(get_registry)
):
    """Replace all tables with a generated layout"""
    session = await registry.get(event_id)
    try:
        policy = TableTypePolicy(
            table_type=body.table_type,
            custom_capacity=body.custom_capacity,
            knight_tables_count=body.knight_tables_count
        )
    except ValidationError as e:
        return error_response(
            message="Invalid table type",
            details=[err["msg"] for err in e.errors()],
            status_code=422
        )

    try:
        result = session.generate_layout(body.guest_count, policy)
    except SeatingError as e:
        return seating_error_response(e)

    return success_response(
        message=f"Generated {len(result.tables)} tables",
        data=session.to_dict()
    )

@router.put("/{event_id}/view")
async def update_view(
    event_id: str,
    body: ViewUpdate,
    registry: SessionRegistry = Depends(get_registry)
):
    """Update map zoom and pan"""
    session = await registry.get(event_id)
    view = session.set_view(zoom=body.zoom, x=body.x, y=body.y)

    return success_response(
        message="View updated",
        data=view.model_dump()
    )

@router.post("/{event_id}/save")
async def save_now(
    event_id: str,
    registry: SessionRegistry = Depends(get_registry)
):
    """Write the arrangement immediately instead of waiting for the quiet period"""
    session = await registry.get(event_id)
    if session.load_failure is not None:
        return seating_error_response(session.load_failure)
    written = await session.save_now()

    error = session.autosave.last_error
    if written and error is not None:
        return seating_error_response(error)

    return success_response(
        message="Seating arrangement saved" if written else "No changes to save",
        data=session.to_dict()
    )

@router.get("/{event_id}/statistics")
async def get_statistics(
    event_id: str,
    registry: SessionRegistry = Depends(get_registry)
):
    """Get seating statistics"""
    session = await registry.get(event_id)

    return success_response(
        message="Seating statistics retrieved",
        data=session.statistics()
    )

@router.get("/{event_id}/export.xlsx")
async def export_arrangement(
    event_id: str,
    registry: SessionRegistry = Depends(get_registry)
):
    """Download the current arrangement as an Excel file"""
    session = await registry.get(event_id)
    excel_bytes = await run_blocking(ExportService.export_arrangement, session.tables)

    return Response(
        content=excel_bytes,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=seating_{event_id}.xlsx"}
    )
