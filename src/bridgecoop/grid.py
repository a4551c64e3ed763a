"""Shared occupancy grid and the support rule for the Bridge co-op game."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

Cell = Tuple[int, int]  # (x, y): column, row; row 0 is the top

NEIGHBOURS: Tuple[Cell, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


# ---------- Layout ----------


@dataclass(frozen=True)
class GridLayout:
    cols: int = 20
    rows: int = 18
    gap_start: int = 4
    # Inclusive; defaults to cols - 5
    gap_end: int = -1

    def __post_init__(self) -> None:
        if self.gap_end < 0:
            object.__setattr__(self, "gap_end", self.cols - 5)
        if self.rows < 2 or self.cols < 3:
            raise ValueError("Grid must be at least 3 columns by 2 rows")
        if not 0 < self.gap_start <= self.gap_end < self.cols - 1:
            raise ValueError(
                f"Gap [{self.gap_start}, {self.gap_end}] must sit strictly "
                f"inside 0..{self.cols - 1}"
            )

    @property
    def target_row(self) -> int:
        return self.rows // 2 + 1

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.cols and 0 <= y < self.rows

    def in_gap(self, x: int) -> bool:
        return self.gap_start <= x <= self.gap_end

    def in_void(self, x: int, y: int) -> bool:
        return y > self.target_row and self.in_gap(x)

    def is_forbidden(self, x: int, y: int) -> bool:
        """Bottom row of the gap never accepts a placement."""
        return y == self.rows - 1 and self.in_gap(x)


DEFAULT_LAYOUT = GridLayout()


# ---------- Grid ----------


@dataclass
class BridgeGrid:
    layout: GridLayout = DEFAULT_LAYOUT
    cells: List[List[int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [[0] * self.layout.cols for _ in range(self.layout.rows)]

    def occupied(self, x: int, y: int) -> bool:
        return self.layout.in_bounds(x, y) and bool(self.cells[y][x])

    def occupied_count(self) -> int:
        return sum(sum(row) for row in self.cells)

    def place(self, placed: Iterable[Cell]) -> int:
        """Mark candidate cells occupied, dropping out-of-bounds and forbidden ones.

        Returns how many candidates were accepted.
        """
        accepted = 0
        for x, y in placed:
            if not self.layout.in_bounds(x, y) or self.layout.is_forbidden(x, y):
                continue
            self.cells[y][x] = 1
            accepted += 1
        return accepted

    def prune(self) -> int:
        """Clear void cells that are neither supported nor connected to a kept cell.

        Returns the number of cells cleared.
        """
        layout = self.layout
        keep = [[False] * layout.cols for _ in range(layout.rows)]

        for y in range(layout.rows):
            for x in range(layout.cols):
                if self.cells[y][x] and self._provisionally_kept(x, y):
                    keep[y][x] = True

        # Flood fill from every kept void cell through occupied neighbours
        stack: List[Cell] = [
            (x, y)
            for y in range(layout.target_row + 1, layout.rows)
            for x in range(layout.gap_start, layout.gap_end + 1)
            if keep[y][x]
        ]
        while stack:
            cx, cy = stack.pop()
            for dx, dy in NEIGHBOURS:
                nx, ny = cx + dx, cy + dy
                if self.occupied(nx, ny) and not keep[ny][nx]:
                    keep[ny][nx] = True
                    stack.append((nx, ny))

        cleared = 0
        for y in range(layout.target_row + 1, layout.rows):
            for x in range(layout.gap_start, layout.gap_end + 1):
                if self.cells[y][x] and not keep[y][x]:
                    self.cells[y][x] = 0
                    cleared += 1
        return cleared

    def is_bridge_complete(self) -> bool:
        """True when the target row is occupied across the whole gap."""
        row = self.cells[self.layout.target_row]
        return all(
            row[x] for x in range(self.layout.gap_start, self.layout.gap_end + 1)
        )

    def clone(self) -> "BridgeGrid":
        return BridgeGrid(layout=self.layout, cells=[row.copy() for row in self.cells])

    def to_wire(self) -> List[List[int]]:
        return [row.copy() for row in self.cells]

    # ---- helpers ----

    def _provisionally_kept(self, x: int, y: int) -> bool:
        layout = self.layout
        if not layout.in_void(x, y):
            return True
        # Direct support from below (the last row counts as ground)
        if y == layout.rows - 1 or self.cells[y + 1][x]:
            return True
        # Anchored sideways to the bank just outside the gap
        if x == layout.gap_start and self.occupied(x - 1, y):
            return True
        if x == layout.gap_end and self.occupied(x + 1, y):
            return True
        return False


def apply_placement_and_prune(grid: BridgeGrid, placed: Iterable[Cell]) -> BridgeGrid:
    """Return a new grid with ``placed`` applied and unsupported void cells removed."""

    result = grid.clone()
    result.place(placed)
    result.prune()
    return result
