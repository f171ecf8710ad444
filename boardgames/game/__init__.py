"""
boardgames.game - Boards, line scanning and evaluation

This package contains the board disciplines, win detection and position
scoring used by the search. The game loop lives in boardgames.game.rules.
"""

from boardgames.game.board import Board, DropBoard, PlacementBoard, create_board
from boardgames.game.evaluation import evaluate, is_game_over, winner, winning_run
from boardgames.game.lines import Direction, Run, find_run

__all__ = ['Board', 'DropBoard', 'PlacementBoard', 'create_board',
           'evaluate', 'is_game_over', 'winner', 'winning_run',
           'Direction', 'Run', 'find_run']
