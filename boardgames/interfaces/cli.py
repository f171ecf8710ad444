"""
cli.py - Command-line interface for playing and analyzing games

This module provides the console player and a CLI with three commands:
play a game against the minimax AI, analyze a position, and benchmark the
search.
"""

import argparse
import re
import sys
import time
from typing import Callable, List, Optional

import numpy as np

from boardgames.ai.minimax import NO_MOVE, MinimaxSearch, SearchConfig
from boardgames.ai.players import MinimaxPlayer
from boardgames.debug import DebugLevel, debug
from boardgames.game.board import Board, DropBoard, Move, PlacementBoard, create_board
from boardgames.game.evaluation import evaluate, winner
from boardgames.game.rules import GameSession
from boardgames.utils import (DEFAULT_SEARCH_DEPTH, GameResult, GameVariant,
                              Mark, parse_mark)

QUIT_COMMANDS = ('q', 'quit', 'exit')


class QuitGame(Exception):
    """The human player asked to leave the game."""


class ConsolePlayer:
    """A player that reads moves from the console."""

    def __init__(self, mark: Mark, input_fn: Optional[Callable[[str], str]] = None,
                 output_fn: Callable[[str], None] = print):
        self.mark = mark
        self.input_fn = input_fn or input
        self.output_fn = output_fn

    def get_move(self, board: Board) -> Move:
        """
        Prompt until the input is a legal move on the board.

        Raises:
            QuitGame: If the player types q
        """
        while True:
            text = self.input_fn(self._prompt(board)).strip().lower()
            if text in QUIT_COMMANDS:
                raise QuitGame()
            try:
                move = self.parse_move(board, text)
            except ValueError as e:
                self.output_fn(str(e))
                continue
            if board.is_legal(move):
                return move
            self.output_fn(f"{move!r} is not available, try again.")

    def _prompt(self, board: Board) -> str:
        if isinstance(board, DropBoard):
            return f"{self.mark} player: pick a column (0-{board.cols - 1}, q to quit): "
        return f"{self.mark} player: enter row and column (e.g. '1 2', q to quit): "

    @staticmethod
    def parse_move(board: Board, text: str) -> Move:
        """
        Parse console input into a move for the given board.

        Raises:
            ValueError: If the text is not a move on the board
        """
        numbers = re.split(r"[\s,]+", text.strip())
        try:
            values = [int(n) for n in numbers if n]
        except ValueError:
            raise ValueError(f"Invalid input: {text!r}. Please enter numbers.") from None

        if isinstance(board, DropBoard):
            if len(values) != 1:
                raise ValueError("Please enter a single column number.")
            col = values[0]
            if not 0 <= col < board.cols:
                raise ValueError(f"Column must be between 0 and {board.cols - 1}.")
            return col

        if len(values) != 2:
            raise ValueError("Please enter a row and a column.")
        row, col = values
        if not board.is_on_board(row, col):
            raise ValueError(f"Cell must be within {board.rows}x{board.cols}.")
        return row, col

    def __repr__(self) -> str:
        return f"ConsolePlayer({self.mark.name})"


def parse_position(variant: GameVariant, text: str) -> Board:
    """Parse a '/'-separated position, top row first."""
    rows = [row for row in text.split('/') if row.strip()]
    if variant == GameVariant.CONNECT_FOUR:
        return DropBoard.from_rows(rows)
    return PlacementBoard.from_rows(rows)


class SimpleCLI:
    """Simple command-line interface for playing and analyzing games."""

    def __init__(self, output_fn: Callable[[str], None] = print):
        self.args = None
        self.output_fn = output_fn

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(description='Minimax board games')
        parser.add_argument('--debug-level', default='warning',
                            choices=[level.name.lower() for level in DebugLevel],
                            help='Logging level')
        parser.add_argument('--log-file', default=None, help='Also log to this file')

        subparsers = parser.add_subparsers(dest='command', help='Command to run')

        def add_game_options(sub):
            sub.add_argument('--game', choices=[v.value for v in GameVariant],
                             default=GameVariant.CONNECT_FOUR.value, help='Game to play')
            sub.add_argument('--depth', type=int, default=DEFAULT_SEARCH_DEPTH,
                             help='Search depth on gravity-drop boards')

        play_parser = subparsers.add_parser('play', help='Play a game against the AI')
        add_game_options(play_parser)
        play_parser.add_argument('--ai-first', action='store_true', help='Let the AI move first')
        play_parser.add_argument('--ai-vs-ai', action='store_true', help='Watch the AI play itself')

        analyze_parser = subparsers.add_parser('analyze', help='Analyze a position')
        add_game_options(analyze_parser)
        analyze_parser.add_argument('--position', required=True,
                                    help="Rows top to bottom separated by '/'. Pass it as "
                                         "--position=ROWS when the first row starts with '-', "
                                         "or use '.' for empty cells, e.g. '.X./.O./...'")
        analyze_parser.add_argument('--mark', default='X', help='Side to move (X or O)')

        benchmark_parser = subparsers.add_parser('benchmark', help='Benchmark the search')
        add_game_options(benchmark_parser)
        benchmark_parser.add_argument('--iterations', type=int, default=5,
                                      help='Number of positions to search')
        benchmark_parser.add_argument('--seed', type=int, default=0, help='Random seed')

        return parser

    def parse_args(self, argv: Optional[List[str]] = None) -> None:
        """Parse command-line arguments and configure logging."""
        self.args = self.build_parser().parse_args(argv)
        debug.configure(level=DebugLevel[self.args.debug_level.upper()])
        if self.args.log_file:
            debug.configure(log_file=self.args.log_file)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the CLI based on the parsed arguments."""
        if argv is not None or not self.args:
            self.parse_args(argv)

        if self.args.command == 'play':
            return self.play_game()
        if self.args.command == 'analyze':
            return self.analyze_position()
        if self.args.command == 'benchmark':
            return self.benchmark()

        self.output_fn("Please specify a command. Use --help for options.")
        return 1

    def _variant(self) -> GameVariant:
        return GameVariant(self.args.game)

    def _config(self, board: Board) -> SearchConfig:
        return SearchConfig.for_board(board, self.args.depth)

    def play_game(self) -> int:
        """Play a game interactively."""
        board = create_board(self._variant())
        config = self._config(board)

        if self.args.ai_vs_ai:
            players = [MinimaxPlayer(Mark.ONE, config), MinimaxPlayer(Mark.TWO, config)]
        elif self.args.ai_first:
            players = [MinimaxPlayer(Mark.ONE, config), ConsolePlayer(Mark.TWO, output_fn=self.output_fn)]
        else:
            players = [ConsolePlayer(Mark.ONE, output_fn=self.output_fn), MinimaxPlayer(Mark.TWO, config)]

        session = GameSession(board, players[0], players[1])
        self.output_fn(f"Starting a new {self._variant().value} game!")
        self.output_fn(session.render())

        try:
            while not session.is_game_over():
                player = session.current_player
                if isinstance(player, MinimaxPlayer):
                    self.output_fn(f"{player.mark} is thinking...")
                move = session.play_turn()
                self.output_fn(f"{player.mark} plays {move!r}")
                self.output_fn(session.render())
        except QuitGame:
            self.output_fn("Quitting game.")
            return 0

        self.output_fn("Game over!")
        if session.result == GameResult.DRAW:
            self.output_fn("It's a draw!")
        else:
            self.output_fn(f"{session.winner()} wins!")
        return 0

    def analyze_position(self) -> int:
        """Print the winner, legal moves, root scores and best move for a position."""
        try:
            board = parse_position(self._variant(), self.args.position)
            mark = parse_mark(self.args.mark)
        except ValueError as e:
            self.output_fn(f"Error parsing position: {e}")
            return 2

        config = self._config(board)
        self.output_fn("Loaded position:")
        self.output_fn(board.render())

        won = winner(board)
        self.output_fn(f"Winner: {won if won else 'none'}")
        self.output_fn(f"Evaluation for {mark}: {evaluate(board, mark, config.heuristic)}")
        self.output_fn(f"Legal moves: {board.legal_moves()}")

        if won is not None or not board.has_legal_move():
            return 0

        search = MinimaxSearch(config)
        move = search.choose_move(board, mark)
        for candidate, score in search.last_scores.items():
            self.output_fn(f"  {candidate!r}: {score}")
        self.output_fn(f"Best move for {mark}: {move!r} ({search.nodes_evaluated} nodes)")
        return 0

    def benchmark(self) -> int:
        """Time the search on random positions."""
        rng = np.random.default_rng(self.args.seed)
        searched = 0
        total_nodes = 0
        total_time = 0.0

        for _ in range(self.args.iterations):
            board = create_board(self._variant())
            mark = self._random_position(board, rng)
            if mark is None:
                continue

            search = MinimaxSearch(self._config(board))
            started = time.perf_counter()
            move = search.choose_move(board, mark)
            total_time += time.perf_counter() - started
            if move is not NO_MOVE:
                searched += 1
                total_nodes += search.nodes_evaluated

        if not searched:
            self.output_fn("No positions searched.")
            return 0

        self.output_fn(f"Searched {searched} positions: {total_nodes} nodes in {total_time:.3f}s")
        self.output_fn(f"{total_time / searched * 1000:.1f} ms per move, "
                       f"{total_nodes / max(total_time, 1e-9):.0f} nodes per second")
        return 0

    @staticmethod
    def _random_position(board: Board, rng: np.random.Generator) -> Optional[Mark]:
        """Play a few random moves without ending the game; return the side to move."""
        mark = Mark.ONE
        for _ in range(int(rng.integers(0, board.rows * board.cols // 3 + 1))):
            moves = board.legal_moves()
            if not moves:
                return None
            move = moves[int(rng.integers(len(moves)))]
            board.place(move, mark)
            if winner(board) is not None:
                board.undo(move)
                break
            mark = mark.other()
        return mark if board.has_legal_move() else None


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    return SimpleCLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
