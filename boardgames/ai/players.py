"""
players.py - Move-producing players

A player is anything with a ``mark`` and a ``get_move(board)`` method. The
minimax and random players live here; the console player lives with the
command-line interface.
"""

from typing import Optional, Protocol

import numpy as np

from boardgames.ai.minimax import NO_MOVE, MinimaxSearch, SearchConfig
from boardgames.debug import debug
from boardgames.game.board import Board, Move
from boardgames.utils import Mark, NoLegalMoveError


class Player(Protocol):
    mark: Mark

    def get_move(self, board: Board) -> Move:
        ...


class MinimaxPlayer:
    """A player choosing moves with MinimaxSearch."""

    def __init__(self, mark: Mark, config: Optional[SearchConfig] = None):
        self.mark = mark
        self.search = MinimaxSearch(config)

    @property
    def nodes_evaluated(self) -> int:
        return self.search.nodes_evaluated

    def get_move(self, board: Board) -> Move:
        move = self.search.choose_move(board, self.mark)
        if move is NO_MOVE:
            raise NoLegalMoveError(f"{self.mark.name} has no legal move")
        return move

    def __repr__(self) -> str:
        return f"MinimaxPlayer({self.mark.name}, {self.search.config})"


class RandomPlayer:
    """A player choosing uniformly among the legal moves."""

    def __init__(self, mark: Mark, seed: Optional[int] = None):
        self.mark = mark
        self.rng = np.random.default_rng(seed)

    def get_move(self, board: Board) -> Move:
        moves = board.legal_moves()
        if not moves:
            raise NoLegalMoveError(f"{self.mark.name} has no legal move")
        move = moves[int(self.rng.integers(len(moves)))]
        debug.debug(f"Random {self.mark.name} picked {move!r}", "search")
        return move

    def __repr__(self) -> str:
        return f"RandomPlayer({self.mark.name})"
