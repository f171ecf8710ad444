"""
evaluation.py - Position scoring and win detection

Scores are always from the perspective of one mark. A completed line dominates
every other pattern: it scores WIN_SCORE for the perspective mark and
-WIN_SCORE for its opponent. The optional open-run heuristic adds
OPEN_RUN_BONUS for each empty cell extending a run one short of winning.
"""

from typing import Optional

from boardgames.game.board import Board
from boardgames.game.lines import Run, find_run, open_ends
from boardgames.utils import OPEN_RUN_BONUS, WIN_SCORE, Mark


def winning_run(board: Board) -> Optional[Run]:
    """Get the first completed line on the board, if any."""
    return find_run(board.grid, board.connect_n)


def winner(board: Board) -> Optional[Mark]:
    """Get the mark that completed a line, or None."""
    run = winning_run(board)
    return run.mark if run else None


def is_draw(board: Board) -> bool:
    return not board.has_legal_move() and winning_run(board) is None


def is_game_over(board: Board) -> bool:
    return not board.has_legal_move() or winning_run(board) is not None


def terminal_score(board: Board, mark: Mark) -> int:
    """WIN_SCORE if ``mark`` has a completed line, -WIN_SCORE if its opponent does, else 0."""
    run = winning_run(board)
    if run is None:
        return 0
    return WIN_SCORE if run.mark == mark else -WIN_SCORE


def open_run_score(board: Board, mark: Mark) -> int:
    """
    Score runs one short of winning by their open ends.

    Every uniform window of ``connect_n - 1`` marks earns OPEN_RUN_BONUS per
    empty extension cell, positive for ``mark`` and negative for the opponent.
    """
    if board.connect_n < 2:
        return 0
    counts = open_ends(board.grid, board.connect_n - 1)
    return OPEN_RUN_BONUS * (counts[mark] - counts[mark.other()])


def evaluate(board: Board, mark: Mark, heuristic: bool = False) -> int:
    """
    Evaluate a board from the perspective of ``mark``.

    Args:
        board: The board to score
        mark: The player the score is for
        heuristic: Add the open-run heuristic to non-terminal positions

    Returns:
        The signed score
    """
    score = terminal_score(board, mark)
    if score or not heuristic:
        return score
    return open_run_score(board, mark)
