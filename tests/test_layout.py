"""
Tests for table layout generation
"""

import pytest
from pydantic import ValidationError

from seatplan.schemas.seating import Shape, TableTypePolicy
from seatplan.services.layout_service import (
    MIN_BOARD_HEIGHT,
    MIN_BOARD_WIDTH,
    TABLE_SIZE,
    create_new_table,
    generate_layout,
)

from conftest import make_table

def overlaps(a, b):
    return abs(a.x - b.x) < TABLE_SIZE and abs(a.y - b.y) < TABLE_SIZE

def test_custom_capacity_scenario():
    """25 guests at 12 per table -> 3 tables, non-overlapping, board above the floor"""
    result = generate_layout(25, TableTypePolicy(table_type="custom", custom_capacity=12))

    assert len(result.tables) == 3
    assert all(t.capacity == 12 for t in result.tables)
    for i, first in enumerate(result.tables):
        for second in result.tables[i + 1:]:
            assert not overlaps(first, second)
    assert result.board.width >= MIN_BOARD_WIDTH
    assert result.board.height >= MIN_BOARD_HEIGHT

def test_regular_and_knight_policies():
    regular = generate_layout(30, TableTypePolicy(table_type="regular"))
    knight = generate_layout(30, TableTypePolicy(table_type="knight"))

    assert [t.capacity for t in regular.tables] == [12, 12, 12]
    assert all(t.shape == Shape.ROUND for t in regular.tables)
    assert [t.capacity for t in knight.tables] == [24, 24]
    assert all(t.shape == Shape.RECTANGULAR for t in knight.tables)
    assert knight.tables[0].name == "Knight Table 1"

def test_mix_policy():
    result = generate_layout(120, TableTypePolicy(table_type="mix", knight_tables_count=2))

    knights = [t for t in result.tables if t.id.startswith("knight")]
    regulars = [t for t in result.tables if t.id.startswith("regular")]
    assert len(knights) == 2
    # 120 - 48 = 72 seats left -> 6 regular tables
    assert len(regulars) == 6
    assert len({t.id for t in result.tables}) == len(result.tables)

def test_mix_defaults_to_four_knight_tables():
    result = generate_layout(50, TableTypePolicy(table_type="mix"))

    assert sum(1 for t in result.tables if t.capacity == 24) == 4
    assert sum(1 for t in result.tables if t.capacity == 12) == 0

def test_large_custom_tables_are_rectangular():
    result = generate_layout(40, TableTypePolicy(table_type="custom", custom_capacity=20))

    assert len(result.tables) == 2
    assert all(t.shape == Shape.RECTANGULAR for t in result.tables)

def test_custom_requires_capacity():
    with pytest.raises(ValidationError):
        TableTypePolicy(table_type="custom")

def test_grid_order_is_left_to_right_top_to_bottom():
    result = generate_layout(5 * 12, TableTypePolicy(table_type="regular"))

    # 5 tables -> 3 columns, 2 rows
    xs = [t.x for t in result.tables]
    ys = [t.y for t in result.tables]
    assert xs[0] < xs[1] < xs[2]
    assert ys[0] == ys[1] == ys[2] < ys[3] == ys[4]
    assert xs[3] == xs[0]

def test_same_input_same_geometry():
    policy = TableTypePolicy(table_type="regular")
    assert generate_layout(77, policy) == generate_layout(77, policy)

def test_large_layout_grows_board():
    result = generate_layout(24 * 100, TableTypePolicy(table_type="knight"))

    assert len(result.tables) == 100
    assert result.board.width > MIN_BOARD_WIDTH
    assert result.board.height > MIN_BOARD_HEIGHT
    for table in result.tables:
        assert 0 <= table.x <= result.board.width - TABLE_SIZE
        assert 0 <= table.y <= result.board.height - TABLE_SIZE

def test_zero_guests():
    result = generate_layout(0, TableTypePolicy())

    assert result.tables == ()
    assert (result.board.width, result.board.height) == (MIN_BOARD_WIDTH, MIN_BOARD_HEIGHT)

def test_negative_guest_count():
    with pytest.raises(ValueError):
        generate_layout(-1, TableTypePolicy())

class TestCreateNewTable:
    """Test the add-table defaults"""

    def test_defaults(self):
        table = create_new_table([])

        assert table.id == "table1"
        assert table.name == "Table 1"
        assert table.capacity == 8
        assert table.shape == Shape.ROUND
        assert (table.x, table.y) == (200, 200)

    def test_staggers_and_skips_taken_ids(self):
        existing = [make_table("table1"), make_table("table2")]

        table = create_new_table(existing)

        assert table.id == "table3"
        assert (table.x, table.y) == (300, 300)

        clash = create_new_table([make_table("table2")])
        assert clash.id == "table3"

    def test_overrides(self):
        table = create_new_table([], name="Head table", capacity=14, x=None)

        assert table.name == "Head table"
        assert table.capacity == 14
        assert table.x == 200
