"""
board.py - Board representation for gravity-drop and free-placement games

This module implements the Board base class and its two disciplines:
DropBoard, where a move names a column and the piece falls to the lowest empty
cell, and PlacementBoard, where a move names an exact (row, col) cell. Both
expose the same capability set (is_legal, place, undo, has_legal_move,
legal_moves) so one search engine can play either.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from boardgames.debug import debug
from boardgames.utils import (CONNECT_FOUR_COLS, CONNECT_FOUR_ROWS, CONNECT_N,
                              SYMBOL_MARKS, TIC_TAC_TOE_N, TIC_TAC_TOE_SIZE,
                              GameVariant, IllegalMoveError, Mark,
                              OutOfBoardError, render_board_ascii)

Cell = Tuple[int, int]
Move = Union[int, Cell]


class Board:
    """
    A fixed-size grid of marks.

    The grid is a numpy int8 array holding Mark values, row 0 at the top.
    Subclasses define what a move is and how it lands on the grid.
    """

    def __init__(self, rows: int, cols: int, connect_n: int):
        """
        Initialize an empty board.

        Args:
            rows: Number of rows
            cols: Number of columns
            connect_n: Run length that wins the game
        """
        if rows < 1 or cols < 1:
            raise ValueError(f"Board dimensions must be positive, got {rows}x{cols}")
        if connect_n < 1:
            raise ValueError(f"Run length must be positive, got {connect_n}")

        self.rows = rows
        self.cols = cols
        self.connect_n = connect_n
        self.grid = np.zeros((rows, cols), dtype=np.int8)
        debug.debug(f"Initializing {type(self).__name__} {rows}x{cols}, run {connect_n}", "board")

    @classmethod
    def from_rows(cls, rows: Sequence[str], connect_n: Optional[int] = None) -> 'Board':
        """
        Create a board from text rows, top row first.

        Whitespace inside a row is ignored. See utils.SYMBOL_MARKS for the
        accepted characters.
        """
        parsed = []
        for text in rows:
            cells = [ch for ch in text if not ch.isspace()]
            try:
                parsed.append([SYMBOL_MARKS[ch.upper()].value for ch in cells])
            except KeyError as e:
                raise ValueError(f"Unknown board symbol {e.args[0]!r} in row {text!r}") from None

        if not parsed or not parsed[0]:
            raise ValueError("Board text must contain at least one cell")
        if any(len(row) != len(parsed[0]) for row in parsed):
            raise ValueError("All board rows must have the same length")

        board = cls(len(parsed), len(parsed[0]), connect_n or cls.default_connect_n(len(parsed), len(parsed[0])))
        board.grid[:, :] = np.array(parsed, dtype=np.int8)
        return board

    @staticmethod
    def default_connect_n(rows: int, cols: int) -> int:
        return min(rows, cols)

    def is_on_board(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> Mark:
        """
        Get the mark at a cell.

        Raises:
            OutOfBoardError: If the cell is not on the board
        """
        if not self.is_on_board(row, col):
            raise OutOfBoardError(f"Cell ({row}, {col}) is off the {self.rows}x{self.cols} board")
        return Mark(int(self.grid[row, col]))

    def clear(self):
        """Remove every piece from the board."""
        debug.debug("Clearing board", "board")
        self.grid.fill(Mark.EMPTY.value)

    def copy(self) -> 'Board':
        new_board = type(self)(self.rows, self.cols, self.connect_n)
        new_board.grid = self.grid.copy()
        return new_board

    def snapshot(self) -> np.ndarray:
        """Get a copy of the grid."""
        return self.grid.copy()

    def is_full(self) -> bool:
        return not bool((self.grid == Mark.EMPTY.value).any())

    def is_legal(self, move: Move) -> bool:
        raise NotImplementedError

    def legal_moves(self) -> List[Move]:
        raise NotImplementedError

    def has_legal_move(self) -> bool:
        raise NotImplementedError

    def place(self, move: Move, mark: Mark) -> bool:
        raise NotImplementedError

    def undo(self, move: Move):
        raise NotImplementedError

    @contextmanager
    def trial(self, move: Move, mark: Mark) -> Iterator['Board']:
        """
        Place a mark for the duration of a with-block.

        The placement is undone when the block exits, including by exception.

        Raises:
            IllegalMoveError: If the move cannot be placed
        """
        if not self.place(move, mark):
            raise IllegalMoveError(f"Cannot place {mark.name} at {move!r}")
        try:
            yield self
        finally:
            self.undo(move)

    @staticmethod
    def _check_mark(mark: Mark):
        if mark not in (Mark.ONE, Mark.TWO):
            raise ValueError(f"Only player marks can be placed, got {mark!r}")

    def render(self) -> str:
        return render_board_ascii(self.grid)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rows={self.rows}, cols={self.cols}, connect_n={self.connect_n})"


class DropBoard(Board):
    """
    A gravity-drop board: a move is a column and the piece falls to the
    lowest empty cell in it.
    """

    def __init__(self, rows: int = CONNECT_FOUR_ROWS, cols: int = CONNECT_FOUR_COLS,
                 connect_n: int = CONNECT_N):
        super().__init__(rows, cols, connect_n)

    @staticmethod
    def default_connect_n(rows: int, cols: int) -> int:
        return min(CONNECT_N, rows, cols)

    @classmethod
    def from_rows(cls, rows: Sequence[str], connect_n: Optional[int] = None) -> 'DropBoard':
        board = super().from_rows(rows, connect_n)
        if not board.is_settled():
            raise ValueError("Gravity-drop board has a piece above an empty cell")
        return board

    def _in_range(self, col) -> bool:
        return isinstance(col, (int, np.integer)) and not isinstance(col, bool) and 0 <= col < self.cols

    def is_legal(self, col: int) -> bool:
        """
        Check if a piece can be dropped in a column.

        Args:
            col: The column to drop a piece in (0-indexed)

        Returns:
            True if the column exists and is not full
        """
        return self._in_range(col) and bool(self.grid[0, col] == Mark.EMPTY.value)

    def legal_moves(self) -> List[int]:
        return [col for col in range(self.cols) if self.grid[0, col] == Mark.EMPTY.value]

    def has_legal_move(self) -> bool:
        return bool((self.grid[0] == Mark.EMPTY.value).any())

    def landing_row(self, col: int) -> Optional[int]:
        """Get the row a piece dropped in ``col`` would land on, or None if it is full."""
        if not self._in_range(col):
            return None
        for row in range(self.rows - 1, -1, -1):
            if self.grid[row, col] == Mark.EMPTY.value:
                return row
        return None

    def place(self, col: int, mark: Mark) -> bool:
        """
        Drop a piece in the specified column.

        Args:
            col: The column to drop a piece in (0-indexed)
            mark: The mark to place

        Returns:
            True if the piece was placed, False if the move is illegal
        """
        self._check_mark(mark)
        row = self.landing_row(col)
        if row is None:
            debug.trace(f"Rejected drop of {mark.name} in column {col}", "board")
            return False

        self.grid[row, col] = mark.value
        return True

    def undo(self, col: int):
        """
        Remove the topmost piece from a column.

        Must mirror an earlier successful place() in the same column.
        """
        assert self._in_range(col), f"undo in column {col} outside the board"
        for row in range(self.rows):
            if self.grid[row, col] != Mark.EMPTY.value:
                self.grid[row, col] = Mark.EMPTY.value
                return
        assert False, f"undo in empty column {col}"

    def is_settled(self) -> bool:
        """Check that no piece sits above an empty cell."""
        occupied = self.grid != Mark.EMPTY.value
        # Once a column holds a piece every cell below it must hold one too
        return bool((occupied[:-1] <= occupied[1:]).all())


class PlacementBoard(Board):
    """A free-placement board: a move is the exact (row, col) cell to fill."""

    def __init__(self, rows: int = TIC_TAC_TOE_SIZE, cols: int = TIC_TAC_TOE_SIZE,
                 connect_n: int = TIC_TAC_TOE_N):
        super().__init__(rows, cols, connect_n)

    def _cell(self, move) -> Optional[Cell]:
        try:
            row, col = move
        except (TypeError, ValueError):
            return None
        for value in (row, col):
            if not isinstance(value, (int, np.integer)) or isinstance(value, bool):
                return None
        if not self.is_on_board(row, col):
            return None
        return int(row), int(col)

    def is_legal(self, move: Cell) -> bool:
        cell = self._cell(move)
        return cell is not None and bool(self.grid[cell] == Mark.EMPTY.value)

    def legal_moves(self) -> List[Cell]:
        rows, cols = np.nonzero(self.grid == Mark.EMPTY.value)
        return list(zip(rows.tolist(), cols.tolist()))

    def has_legal_move(self) -> bool:
        return not self.is_full()

    def place(self, move: Cell, mark: Mark) -> bool:
        """
        Put a mark on an empty cell.

        Returns:
            True if the mark was placed, False if the cell is off the board or taken
        """
        self._check_mark(mark)
        if not self.is_legal(move):
            debug.trace(f"Rejected {mark.name} at {move!r}", "board")
            return False

        self.grid[self._cell(move)] = mark.value
        return True

    def undo(self, move: Cell):
        """Clear the cell filled by the matching place()."""
        cell = self._cell(move)
        assert cell is not None, f"undo at {move!r} outside the board"
        assert self.grid[cell] != Mark.EMPTY.value, f"undo at empty cell {move!r}"
        self.grid[cell] = Mark.EMPTY.value


def create_board(variant: GameVariant) -> Board:
    """Create the standard empty board for a game variant."""
    if variant == GameVariant.CONNECT_FOUR:
        return DropBoard(CONNECT_FOUR_ROWS, CONNECT_FOUR_COLS, CONNECT_N)
    if variant == GameVariant.TIC_TAC_TOE:
        return PlacementBoard(TIC_TAC_TOE_SIZE, TIC_TAC_TOE_SIZE, TIC_TAC_TOE_N)
    raise ValueError(f"Unknown game variant: {variant!r}")
