"""
utils.py - Constants, enumerations and exceptions shared across boardgames

This module provides the cell marks, game variants, search constants and the
exception types used by the boards, the search engine and the game loop.
"""

from enum import Enum, auto
from typing import Dict

import numpy as np

# Connect Four board
CONNECT_FOUR_ROWS = 6
CONNECT_FOUR_COLS = 7
CONNECT_N = 4  # Number of pieces in a row to win

# Tic-Tac-Toe board
TIC_TAC_TOE_SIZE = 3
TIC_TAC_TOE_N = 3

# Evaluation
WIN_SCORE = 1000
OPEN_RUN_BONUS = 50

# Plies searched below the root move on gravity-drop boards
DEFAULT_SEARCH_DEPTH = 6


class Mark(Enum):
    """Enumeration representing the contents of a cell."""
    EMPTY = 0
    ONE = 1    # First player
    TWO = 2    # Second player

    def other(self) -> 'Mark':
        """Get the opposing mark."""
        if self == Mark.ONE:
            return Mark.TWO
        elif self == Mark.TWO:
            return Mark.ONE
        raise ValueError("Mark.EMPTY has no opponent")

    @property
    def symbol(self) -> str:
        return MARK_SYMBOLS[self]

    def __str__(self):
        return self.symbol


MARK_SYMBOLS = {
    Mark.EMPTY: "-",
    Mark.ONE: "X",
    Mark.TWO: "O",
}

# Characters accepted when reading a board from text
SYMBOL_MARKS: Dict[str, Mark] = {
    "-": Mark.EMPTY,
    ".": Mark.EMPTY,
    "X": Mark.ONE,
    "R": Mark.ONE,
    "1": Mark.ONE,
    "O": Mark.TWO,
    "Y": Mark.TWO,
    "2": Mark.TWO,
}


class GameVariant(Enum):
    """The supported board disciplines with their standard sizes."""
    CONNECT_FOUR = "connect4"
    TIC_TAC_TOE = "tictactoe"


class GameResult(Enum):
    """Enumeration representing the game outcome."""
    IN_PROGRESS = auto()
    PLAYER_ONE_WIN = auto()
    PLAYER_TWO_WIN = auto()
    DRAW = auto()

    def is_game_over(self) -> bool:
        """Check if the game is over."""
        return self != GameResult.IN_PROGRESS

    @classmethod
    def for_winner(cls, mark: Mark) -> 'GameResult':
        if mark == Mark.ONE:
            return cls.PLAYER_ONE_WIN
        if mark == Mark.TWO:
            return cls.PLAYER_TWO_WIN
        raise ValueError(f"No result for mark {mark!r}")


class IllegalMoveError(ValueError):
    """A move could not be applied to the board."""


class OutOfBoardError(IndexError):
    """Coordinates outside the board were queried."""


class NoLegalMoveError(RuntimeError):
    """A move was requested from a position with no legal moves."""


class GameOverError(RuntimeError):
    """A turn was requested after the game finished."""


def parse_mark(text: str) -> Mark:
    """
    Parse a player mark from its symbol.

    Args:
        text: A single symbol such as 'X', 'O', 'R' or 'Y'

    Returns:
        The corresponding non-empty mark
    """
    mark = SYMBOL_MARKS.get(text.strip().upper())
    if mark is None or mark == Mark.EMPTY:
        raise ValueError(f"Unknown player mark: {text!r}")
    return mark


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render a grid of mark values as ASCII art.

    Args:
        grid: 2D array of mark values

    Returns:
        ASCII representation of the board with column numbers underneath
    """
    rows, cols = grid.shape
    result = ["|" + "-" * (cols * 2 - 1) + "|"]

    for row in range(rows):
        cells = [Mark(int(grid[row, col])).symbol for col in range(cols)]
        result.append("|" + " ".join(cells) + "|")

    result.append("|" + "-" * (cols * 2 - 1) + "|")
    result.append("|" + " ".join(str(col % 10) for col in range(cols)) + "|")

    return "\n".join(result)
