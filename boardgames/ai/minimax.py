"""
minimax.py - Minimax search over gravity-drop and free-placement boards

This module provides the MinimaxSearch engine and its move selector. The
search borrows the caller's board and mutates it in place, one trial
placement per branch, so the board is identical before and after every call.

Scoring:
1. A completed line is worth WIN_SCORE, adjusted by depth so that faster wins
   and slower losses are preferred
2. At the depth limit, non-terminal leaves use the open-run heuristic when the
   configuration enables it
3. Among equally valued moves the first one enumerated is kept

Alpha-beta pruning can be switched on in SearchConfig. It returns the same
move and the same value for it, visiting fewer nodes; the scores kept for
the other root moves are then only upper bounds.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from boardgames.debug import debug
from boardgames.game.board import Board, DropBoard, Move
from boardgames.game.evaluation import open_run_score, terminal_score
from boardgames.utils import DEFAULT_SEARCH_DEPTH, WIN_SCORE, Mark

# Returned by choose_move when the board has no legal move
NO_MOVE = None


@dataclass(frozen=True)
class SearchConfig:
    """
    How far to search and how to value the leaves.

    Attributes:
        max_depth: Depth at which expansion stops, None to search to the end.
            Root moves are searched at depth 0, so d means d + 1 plies.
        heuristic: Score non-terminal leaves with the open-run heuristic
        pruning: Cut branches with alpha-beta bounds
    """
    max_depth: Optional[int] = None
    heuristic: bool = False
    pruning: bool = False

    def __post_init__(self):
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")

    @classmethod
    def depth_limited(cls, depth: int = DEFAULT_SEARCH_DEPTH, pruning: bool = False) -> 'SearchConfig':
        return cls(max_depth=depth, heuristic=True, pruning=pruning)

    @classmethod
    def exhaustive(cls, pruning: bool = False) -> 'SearchConfig':
        return cls(max_depth=None, heuristic=False, pruning=pruning)

    @classmethod
    def for_board(cls, board: Board, depth: int = DEFAULT_SEARCH_DEPTH) -> 'SearchConfig':
        """Depth-limited with the heuristic on drop boards, exhaustive otherwise; both pruned."""
        if isinstance(board, DropBoard):
            return cls.depth_limited(depth, pruning=True)
        return cls.exhaustive(pruning=True)


class MinimaxSearch:
    """
    Minimax, optionally with alpha-beta pruning.

    The evaluation perspective is the mark passed to choose_move; maximizing
    nodes place that mark and minimizing nodes place its opponent's.
    """

    def __init__(self, config: Optional[SearchConfig] = None):
        """
        Initialize the search.

        Args:
            config: Search configuration; when None it is chosen per board
                with SearchConfig.for_board on each call
        """
        self.config = config
        self.nodes_evaluated = 0  # For performance tracking
        self.last_scores: Dict[Move, int] = {}
        self._active: SearchConfig = config or SearchConfig.exhaustive()

    def choose_move(self, board: Board, mark: Mark) -> Optional[Move]:
        """
        Get the best move for ``mark``.

        Args:
            board: The current board, restored before returning
            mark: The player to move

        Returns:
            The best move, or NO_MOVE if the board has no legal move
        """
        self._active = self.config or SearchConfig.for_board(board)
        self.nodes_evaluated = 0
        self.last_scores = {}

        best_score = None
        best_move = NO_MOVE

        debug.start_timer("choose_move")
        for move in board.legal_moves():
            # Root moves keep their own order so ties go to the first one
            alpha = best_score if self._active.pruning and best_score is not None else -math.inf
            with board.trial(move, mark):
                score = self.minimax(board, 0, False, mark, alpha)
            self.last_scores[move] = score

            if best_score is None or score > best_score:
                best_score = score
                best_move = move
        elapsed = debug.end_timer("choose_move", "search")

        if best_move is NO_MOVE:
            debug.warning(f"No legal move for {mark.name}", "search")
        else:
            debug.debug(f"{mark.name} chose {best_move!r} (score {best_score}, "
                        f"{self.nodes_evaluated} nodes, {elapsed or 0.0:.3f}s)", "search")
        return best_move

    def minimax(self, board: Board, depth: int, is_maximizing: bool, mark: Mark,
                alpha: float = -math.inf, beta: float = math.inf) -> int:
        """
        Value a position assuming both sides play optimally.

        Args:
            board: Current board, mutated and restored during the search
            depth: Current depth below the root move
            is_maximizing: True if ``mark`` moves at this node
            mark: The player the values are for
            alpha: Value the maximizing side is already assured of
            beta: Value the minimizing side is already assured of

        Returns:
            The minimax value of the position. With pruning, a value at or
            below alpha (or at or above beta) only bounds the true value.
        """
        self.nodes_evaluated += 1

        outcome = terminal_score(board, mark)
        if outcome > 0:
            return WIN_SCORE - depth + outcome
        if outcome < 0:
            return -WIN_SCORE + depth + outcome

        config = self._active
        at_limit = config.max_depth is not None and depth >= config.max_depth
        if at_limit or not board.has_legal_move():
            return open_run_score(board, mark) if config.heuristic else 0

        mover = mark if is_maximizing else mark.other()
        best_value = None

        for move in self._ordered_moves(board):
            with board.trial(move, mover):
                value = self.minimax(board, depth + 1, not is_maximizing, mark, alpha, beta)

            if best_value is None:
                best_value = value
            elif is_maximizing and value > best_value:
                best_value = value
            elif not is_maximizing and value < best_value:
                best_value = value

            if config.pruning:
                if is_maximizing:
                    alpha = max(alpha, value)
                else:
                    beta = min(beta, value)
                if alpha >= beta:
                    break

        if best_value is None:
            return open_run_score(board, mark) if config.heuristic else 0
        return best_value

    def _ordered_moves(self, board: Board) -> List[Move]:
        """Legal moves, centre columns first on drop boards when pruning."""
        moves = board.legal_moves()
        if self._active.pruning and isinstance(board, DropBoard):
            centre = (board.cols - 1) / 2
            moves.sort(key=lambda col: abs(col - centre))
        return moves
