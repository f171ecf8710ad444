"""
lines.py - Line scanning for win detection and open-run scoring

Every straight window of a given length on a rows x cols grid is enumerated
once, in a fixed order: horizontal windows, then vertical, then rising
diagonals, then falling diagonals. The window tables are cached per board
shape so the scans themselves are plain numpy indexing.
"""

from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

import numpy as np

from boardgames.utils import Mark

Cell = Tuple[int, int]

# Value standing in for any cell beyond the board edge
OFF_BOARD = -1


class Direction(Enum):
    """Enumeration representing line orientations."""
    HORIZONTAL = auto()
    VERTICAL = auto()
    DIAGONAL_UP = auto()  # Diagonal from bottom-left to top-right
    DIAGONAL_DOWN = auto()  # Diagonal from top-left to bottom-right


# Direction vectors (row, col) for each direction
DIRECTION_VECTORS = {
    Direction.HORIZONTAL: (0, 1),
    Direction.VERTICAL: (1, 0),
    Direction.DIAGONAL_UP: (-1, 1),
    Direction.DIAGONAL_DOWN: (1, 1),
}

SCAN_ORDER = (
    Direction.HORIZONTAL,
    Direction.VERTICAL,
    Direction.DIAGONAL_UP,
    Direction.DIAGONAL_DOWN,
)


@dataclass(frozen=True)
class Run:
    """A window of identical non-empty marks."""
    mark: Mark
    start: Cell
    direction: Direction
    cells: Tuple[Cell, ...]


@dataclass(frozen=True)
class WindowTable:
    """
    Flat cell indices of every window of one length on one board shape.

    ``before``/``after`` hold the flat index of the cell extending each window
    on either end, or ``rows * cols`` when that cell is off the board. Grids
    are padded with ``OFF_BOARD`` at that index before lookup.
    """
    rows: int
    cols: int
    length: int
    cells: np.ndarray
    before: np.ndarray
    after: np.ndarray
    directions: Tuple[Direction, ...]

    def __len__(self) -> int:
        return len(self.directions)

    def window_cells(self, index: int) -> Tuple[Cell, ...]:
        return tuple(divmod(int(flat), self.cols) for flat in self.cells[index])


@lru_cache(maxsize=None)
def window_table(rows: int, cols: int, length: int) -> WindowTable:
    """
    Build the table of all windows of ``length`` cells on a rows x cols grid.

    Orientations that do not fit on the board contribute no windows.
    """
    if length < 1:
        raise ValueError(f"Window length must be positive, got {length}")

    off_board = rows * cols
    cells: List[List[int]] = []
    before: List[int] = []
    after: List[int] = []
    directions: List[Direction] = []

    def flat_index(r: int, c: int) -> int:
        if 0 <= r < rows and 0 <= c < cols:
            return r * cols + c
        return off_board

    for direction in SCAN_ORDER:
        dr, dc = DIRECTION_VECTORS[direction]
        if direction == Direction.VERTICAL:
            # Column by column, top to bottom
            starts = [(row, col) for col in range(cols) for row in range(rows)]
        else:
            starts = [(row, col) for row in range(rows) for col in range(cols)]

        for row, col in starts:
            end_row = row + (length - 1) * dr
            end_col = col + (length - 1) * dc
            if not (0 <= end_row < rows and 0 <= end_col < cols):
                continue
            cells.append([(row + i * dr) * cols + (col + i * dc) for i in range(length)])
            before.append(flat_index(row - dr, col - dc))
            after.append(flat_index(end_row + dr, end_col + dc))
            directions.append(direction)

    return WindowTable(
        rows=rows,
        cols=cols,
        length=length,
        cells=np.array(cells, dtype=np.intp).reshape(-1, length),
        before=np.array(before, dtype=np.intp),
        after=np.array(after, dtype=np.intp),
        directions=tuple(directions),
    )


def _uniform_windows(grid: np.ndarray, table: WindowTable) -> Tuple[np.ndarray, np.ndarray]:
    """Indices of windows holding a single non-empty mark, and each window's first value."""
    values = grid.ravel()[table.cells]
    first = values[:, 0]
    uniform = (first != Mark.EMPTY.value) & (values == first[:, None]).all(axis=1)
    hits = np.flatnonzero(uniform)
    return hits, first[hits]


def find_run(grid: np.ndarray, length: int) -> Optional[Run]:
    """
    Find the first run of ``length`` identical non-empty marks.

    Args:
        grid: 2D array of mark values
        length: Required run length

    Returns:
        The first run in scan order, or None if there is none
    """
    table = window_table(grid.shape[0], grid.shape[1], length)
    if not len(table):
        return None

    hits, marks = _uniform_windows(grid, table)
    if not hits.size:
        return None

    index = int(hits[0])
    cells = table.window_cells(index)
    return Run(
        mark=Mark(int(marks[0])),
        start=cells[0],
        direction=table.directions[index],
        cells=cells,
    )


def find_all_runs(grid: np.ndarray, length: int) -> List[Run]:
    """Find every window of ``length`` identical non-empty marks, in scan order."""
    table = window_table(grid.shape[0], grid.shape[1], length)
    if not len(table):
        return []

    hits, marks = _uniform_windows(grid, table)
    runs = []
    for index, value in zip(hits.tolist(), marks.tolist()):
        cells = table.window_cells(index)
        runs.append(Run(Mark(value), cells[0], table.directions[index], cells))
    return runs


def open_ends(grid: np.ndarray, length: int) -> Dict[Mark, int]:
    """
    Count empty extension cells next to uniform windows of ``length``.

    Each end of each window counts on its own, so a run open on both sides
    counts twice. Ends that fall off the board never count.

    Returns:
        Mapping of Mark.ONE and Mark.TWO to their open-end counts
    """
    counts = {Mark.ONE: 0, Mark.TWO: 0}
    table = window_table(grid.shape[0], grid.shape[1], length)
    if not len(table):
        return counts

    hits, marks = _uniform_windows(grid, table)
    if not hits.size:
        return counts

    padded = np.append(grid.ravel(), OFF_BOARD)
    empty = Mark.EMPTY.value
    ends = ((padded[table.before[hits]] == empty).astype(int)
            + (padded[table.after[hits]] == empty).astype(int))

    for mark in counts:
        counts[mark] = int(ends[marks == mark.value].sum())
    return counts
