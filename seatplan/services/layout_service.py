"""
Table layout generation
"""

import math
from typing import List, Sequence

from seatplan.core.config import settings
from seatplan.schemas.seating import BoardDimensions, LayoutResult, Shape, Table, TableTypePolicy

TABLE_SIZE = 140
TABLE_SPACING = 60
MAP_PADDING = 60
MIN_BOARD_WIDTH = 1800
MIN_BOARD_HEIGHT = 1200

# Custom tables above this many seats are drawn as long tables
RECTANGULAR_THRESHOLD = 16


def _tables(count: int, prefix: str, name: str, capacity: int, shape: Shape) -> List[Table]:
    return [
        Table(id=f"{prefix}{i + 1}", name=f"{name} {i + 1}", capacity=capacity, shape=shape)
        for i in range(count)
    ]


def build_tables(guest_count: int, policy: TableTypePolicy) -> List[Table]:
    """Decide table count and sizes for ``guest_count`` seats"""
    regular = settings.REGULAR_TABLE_CAPACITY
    knight = settings.KNIGHT_TABLE_CAPACITY

    if policy.table_type == "regular":
        return _tables(math.ceil(guest_count / regular), "table", "Table", regular, Shape.ROUND)

    if policy.table_type == "knight":
        return _tables(math.ceil(guest_count / knight), "table", "Knight Table", knight, Shape.RECTANGULAR)

    if policy.table_type == "mix":
        knight_count = policy.knight_tables_count
        if knight_count is None:
            knight_count = settings.DEFAULT_KNIGHT_TABLES
        remaining = guest_count - knight_count * knight
        regular_count = max(0, math.ceil(remaining / regular))
        return (
            _tables(knight_count, "knight", "Knight Table", knight, Shape.RECTANGULAR)
            + _tables(regular_count, "regular", "Table", regular, Shape.ROUND)
        )

    capacity = policy.custom_capacity
    shape = Shape.RECTANGULAR if capacity > RECTANGULAR_THRESHOLD else Shape.ROUND
    return _tables(math.ceil(guest_count / capacity), "table", "Table", capacity, shape)


def generate_layout(guest_count: int, policy: TableTypePolicy) -> LayoutResult:
    """Lay tables out on a centred, roughly square grid.

    Tables are placed left to right, top to bottom. The board is the grid plus
    padding, never smaller than the minimum board size.
    """
    if guest_count < 0:
        raise ValueError("guest_count must not be negative")

    tables = build_tables(guest_count, policy)
    count = len(tables)
    if count == 0:
        return LayoutResult(tables=(), board=BoardDimensions(width=MIN_BOARD_WIDTH, height=MIN_BOARD_HEIGHT))

    cols = math.ceil(math.sqrt(count))
    rows = math.ceil(count / cols)
    step = TABLE_SIZE + TABLE_SPACING

    total_width = cols * step - TABLE_SPACING
    total_height = rows * step - TABLE_SPACING

    width = max(MIN_BOARD_WIDTH, total_width + MAP_PADDING * 2)
    height = max(MIN_BOARD_HEIGHT, total_height + MAP_PADDING * 2)

    start_x = (width - total_width) / 2
    start_y = (height - total_height) / 2

    positioned = tuple(
        table.model_copy(update={
            "x": start_x + (i % cols) * step,
            "y": start_y + (i // cols) * step,
        })
        for i, table in enumerate(tables)
    )
    return LayoutResult(tables=positioned, board=BoardDimensions(width=width, height=height))


def create_new_table(existing: Sequence[Table], **overrides) -> Table:
    """Default table for the "add table" action, staggered on the map"""
    taken = {t.id for t in existing}
    number = len(existing) + 1
    while f"table{number}" in taken:
        number += 1

    fields = {
        "id": f"table{number}",
        "name": f"Table {number}",
        "capacity": settings.DEFAULT_TABLE_CAPACITY,
        "shape": Shape.ROUND,
        "x": 200 + len(existing) * 50,
        "y": 200 + len(existing) * 50,
    }
    fields.update({key: value for key, value in overrides.items() if value is not None})
    return Table(**fields)
