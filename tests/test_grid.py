"""Unit tests for the bridge grid and its support rule."""

import random
from collections import deque

import pytest

from bridgecoop.grid import BridgeGrid, GridLayout, apply_placement_and_prune

LAYOUT = GridLayout()


def occupied_cells(grid):
    return {
        (x, y)
        for y, row in enumerate(grid.cells)
        for x, value in enumerate(row)
        if value
    }


def random_cells(rng, count):
    return [
        (rng.randrange(LAYOUT.cols), rng.randrange(LAYOUT.rows)) for _ in range(count)
    ]


def test_default_layout_matches_game_constants():
    assert (LAYOUT.cols, LAYOUT.rows) == (20, 18)
    assert LAYOUT.target_row == 10
    assert (LAYOUT.gap_start, LAYOUT.gap_end) == (4, 15)


def test_layout_rejects_gap_touching_the_edge():
    with pytest.raises(ValueError):
        GridLayout(cols=10, rows=6, gap_start=0, gap_end=4)
    with pytest.raises(ValueError):
        GridLayout(cols=10, rows=6, gap_start=2, gap_end=9)


def test_placement_on_gap_bottom_row_is_rejected():
    grid = apply_placement_and_prune(BridgeGrid(), [(10, 17)])
    assert occupied_cells(grid) == set()


def test_unsupported_void_cell_is_pruned():
    grid = apply_placement_and_prune(BridgeGrid(), [(10, 16)])
    assert occupied_cells(grid) == set()


def test_column_from_target_row_survives():
    column = [(10, y) for y in range(10, 17)]
    grid = apply_placement_and_prune(BridgeGrid(), column)
    assert occupied_cells(grid) == set(column)


def test_target_row_cell_is_always_kept():
    grid = apply_placement_and_prune(BridgeGrid(), [(7, 10), (12, 3)])
    assert occupied_cells(grid) == {(7, 10), (12, 3)}


def test_cell_hanging_from_target_row_is_pruned():
    grid = apply_placement_and_prune(BridgeGrid(), [(10, 10), (10, 11)])
    assert occupied_cells(grid) == {(10, 10)}


def test_cells_outside_gap_are_kept_anywhere():
    cells = [(0, 17), (2, 16), (19, 12), (16, 14)]
    grid = apply_placement_and_prune(BridgeGrid(), cells)
    assert occupied_cells(grid) == set(cells)


def test_structure_hanging_from_bank_anchor_survives():
    cells = [(3, 14), (4, 14), (5, 14), (5, 15), (5, 16)]
    grid = apply_placement_and_prune(BridgeGrid(), cells)
    assert occupied_cells(grid) == set(cells)


def test_right_bank_anchor():
    cells = [(16, 13), (15, 13), (14, 13)]
    grid = apply_placement_and_prune(BridgeGrid(), cells)
    assert occupied_cells(grid) == set(cells)


def test_diagonal_neighbour_does_not_anchor():
    grid = apply_placement_and_prune(BridgeGrid(), [(3, 13), (4, 14)])
    assert occupied_cells(grid) == {(3, 13)}


def test_out_of_bounds_cells_are_dropped():
    grid = BridgeGrid()
    accepted = grid.place([(-1, 0), (20, 0), (0, 18), (0, -3), (12, 17)])
    assert accepted == 0
    assert grid.occupied_count() == 0


def test_apply_does_not_mutate_input():
    grid = BridgeGrid()
    result = apply_placement_and_prune(grid, [(1, 1)])
    assert grid.occupied_count() == 0
    assert result.occupied_count() == 1


def test_empty_batch_revalidates_grid():
    grid = BridgeGrid()
    grid.cells[15][8] = 1  # written behind the rules' back
    result = apply_placement_and_prune(grid, [])
    assert result.occupied_count() == 0


def test_removing_support_prunes_what_it_held():
    grid = apply_placement_and_prune(BridgeGrid(), [(3, 14), (4, 14), (5, 14)])
    grid.cells[14][3] = 0
    assert grid.prune() == 2
    assert grid.occupied_count() == 0


@pytest.mark.parametrize("seed", range(10))
def test_pruning_is_idempotent(seed):
    rng = random.Random(seed)
    grid = BridgeGrid()
    grid.place(random_cells(rng, 120))
    grid.prune()
    once = grid.to_wire()
    assert grid.prune() == 0
    assert grid.to_wire() == once


@pytest.mark.parametrize("seed", range(10))
def test_final_grid_does_not_depend_on_batch_order(seed):
    rng = random.Random(seed)
    cells = list(dict.fromkeys(random_cells(rng, 150)))
    batch_a, batch_b = cells[::2], cells[1::2]

    first = BridgeGrid()
    first.place(batch_a)
    first.place(batch_b)
    first.prune()

    second = BridgeGrid()
    second.place(batch_b)
    second.place(batch_a)
    second.prune()

    assert first.to_wire() == second.to_wire()


def _anchored(grid, x, y):
    layout = grid.layout
    if y == layout.rows - 1 or grid.occupied(x, y + 1):
        return True
    if x == layout.gap_start and grid.occupied(x - 1, y):
        return True
    return x == layout.gap_end and grid.occupied(x + 1, y)


def _reaches_anchor(grid, start):
    seen = {start}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        if grid.layout.in_void(x, y) and _anchored(grid, x, y):
            return True
        for nx, ny in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            if grid.occupied(nx, ny) and (nx, ny) not in seen:
                seen.add((nx, ny))
                queue.append((nx, ny))
    return False


@pytest.mark.parametrize("seed", range(10))
def test_every_remaining_void_cell_is_supported(seed):
    rng = random.Random(seed)
    grid = BridgeGrid()
    for _ in range(5):
        grid = apply_placement_and_prune(grid, random_cells(rng, 40))
        for x, y in occupied_cells(grid):
            if LAYOUT.in_void(x, y):
                assert _reaches_anchor(grid, (x, y))


@pytest.mark.parametrize("seed", range(5))
def test_gap_bottom_row_never_fills(seed):
    rng = random.Random(seed)
    grid = BridgeGrid()
    bottom = [(x, LAYOUT.rows - 1) for x in range(LAYOUT.gap_start, LAYOUT.gap_end + 1)]
    grid = apply_placement_and_prune(grid, random_cells(rng, 200) + bottom)
    assert not any(grid.occupied(x, y) for x, y in bottom)


def test_bridge_complete_requires_full_target_row_across_gap():
    deck = [(x, LAYOUT.target_row) for x in range(LAYOUT.gap_start, LAYOUT.gap_end + 1)]
    grid = apply_placement_and_prune(BridgeGrid(), deck[:-1])
    assert not grid.is_bridge_complete()
    grid = apply_placement_and_prune(grid, deck[-1:])
    assert grid.is_bridge_complete()


def test_wire_form_is_rows_by_cols():
    wire = BridgeGrid().to_wire()
    assert len(wire) == 18
    assert all(len(row) == 20 for row in wire)
