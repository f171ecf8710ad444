"""
rules.py - Game sessions and Gymnasium environment

This module provides:
1. GameSession, the turn loop that asks two players for moves and detects the
   end of the game
2. GridGameEnv, a gymnasium-compatible environment in which an agent plays
   Mark.ONE against a Player holding Mark.TWO
"""

from typing import Dict, List, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from boardgames.ai.players import MinimaxPlayer, Player
from boardgames.debug import debug
from boardgames.game.board import Board, DropBoard, Move, create_board
from boardgames.game.evaluation import winning_run
from boardgames.game.lines import Run
from boardgames.utils import (GameOverError, GameResult, GameVariant,
                              IllegalMoveError, Mark)


class GameSession:
    """
    A two-player game on one board.

    The session owns the board for the game's duration. Player one holds
    Mark.ONE and moves first.
    """

    def __init__(self, board: Board, player_one: Player, player_two: Player,
                 max_attempts: int = 10):
        """
        Initialize a new game.

        Args:
            board: The board to play on
            player_one: Player holding Mark.ONE
            player_two: Player holding Mark.TWO
            max_attempts: Illegal moves tolerated from a player in one turn
        """
        if player_one.mark != Mark.ONE or player_two.mark != Mark.TWO:
            raise ValueError("Player one must hold Mark.ONE and player two Mark.TWO")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")

        debug.debug(f"Initializing GameSession: {player_one!r} vs {player_two!r}", "game")
        self.board = board
        self.players = (player_one, player_two)
        self.max_attempts = max_attempts
        self.reset()

    def reset(self) -> None:
        """Reset the game to initial state."""
        debug.debug("Resetting game", "game")
        self.board.clear()
        self.moves_made: List[Move] = []
        self.result = GameResult.IN_PROGRESS
        self._turn = 0

    @property
    def current_player(self) -> Player:
        return self.players[self._turn]

    def is_game_over(self) -> bool:
        return self.result.is_game_over()

    def make_move(self, move: Move) -> bool:
        """
        Play a move for the current player.

        Args:
            move: Column (drop boards) or (row, col) cell (placement boards)

        Returns:
            True if the move was played, False if it was illegal
        """
        if self.is_game_over():
            debug.debug(f"Invalid move: game is over (result: {self.result})", "game")
            return False

        mark = self.current_player.mark
        if not self.board.place(move, mark):
            debug.debug(f"Invalid move {move!r} for {mark.name}", "game")
            return False

        self.moves_made.append(move)
        self._update_result()
        if not self.is_game_over():
            self._turn = 1 - self._turn
        return True

    def _update_result(self) -> None:
        run = winning_run(self.board)
        if run is not None:
            self.result = GameResult.for_winner(run.mark)
            debug.info(f"{run.mark.name} wins with a line from {run.start} "
                       f"after {len(self.moves_made)} moves", "game")
        elif not self.board.has_legal_move():
            self.result = GameResult.DRAW
            debug.info("Game ends in a draw", "game")

    def play_turn(self) -> Move:
        """
        Ask the current player for a move and play it.

        Returns:
            The move that was played

        Raises:
            GameOverError: If the game already ended
            IllegalMoveError: If the player keeps producing illegal moves
        """
        if self.is_game_over():
            raise GameOverError(f"Game is over: {self.result.name}")

        player = self.current_player
        for attempt in range(1, self.max_attempts + 1):
            move = player.get_move(self.board)
            if self.make_move(move):
                return move
            debug.warning(f"Illegal move {move!r} from {player!r} "
                          f"(attempt {attempt}/{self.max_attempts})", "game")

        raise IllegalMoveError(f"{player!r} produced {self.max_attempts} illegal moves")

    def play(self) -> GameResult:
        """Play turns until the game ends."""
        while not self.is_game_over():
            self.play_turn()
        return self.result

    def undo_move(self) -> bool:
        """
        Undo the last move.

        Returns:
            True if a move was undone, False if no moves to undo
        """
        if not self.moves_made:
            debug.debug("No moves to undo", "game")
            return False

        move = self.moves_made.pop()
        debug.debug(f"Undoing move {move!r}", "game")
        self.board.undo(move)
        # The player who made the move is to play again
        if not self.is_game_over():
            self._turn = 1 - self._turn
        self.result = GameResult.IN_PROGRESS
        return True

    def winner(self) -> Optional[Mark]:
        if self.result == GameResult.PLAYER_ONE_WIN:
            return Mark.ONE
        if self.result == GameResult.PLAYER_TWO_WIN:
            return Mark.TWO
        return None

    def winning_run(self) -> Optional[Run]:
        return winning_run(self.board)

    def render(self) -> str:
        return self.board.render()


class GridGameEnv(gym.Env):
    """
    Board game environment following the Gymnasium interface.

    The agent plays Mark.ONE and moves first; after each agent move the
    opponent replies on the same step.
    """

    metadata = {'render_modes': ['ascii', 'human'], 'render_fps': 4}

    def __init__(self, variant: GameVariant = GameVariant.CONNECT_FOUR,
                 opponent: Optional[Player] = None,
                 render_mode: Optional[str] = None):
        """
        Initialize the environment.

        Args:
            variant: Which board to play on
            opponent: Player holding Mark.TWO (default MinimaxPlayer)
            render_mode: Mode for rendering the environment
        """
        debug.debug(f"Initializing GridGameEnv for {variant.value}", "env")

        self.board = create_board(variant)
        self.opponent = opponent or MinimaxPlayer(Mark.TWO)
        if self.opponent.mark != Mark.TWO:
            raise ValueError("The opponent must hold Mark.TWO")
        self.render_mode = render_mode

        if isinstance(self.board, DropBoard):
            self.action_space = spaces.Discrete(self.board.cols)
        else:
            self.action_space = spaces.Discrete(self.board.rows * self.board.cols)

        self.observation_space = spaces.Box(
            low=0, high=2, shape=(self.board.rows, self.board.cols), dtype=np.int8
        )

        self.reward_win = 1.0
        self.reward_lose = -1.0
        self.reward_draw = 0.1
        self.reward_invalid_move = -0.5
        self.reward_step = 0.0

        self.moves_made: List[Move] = []
        self.result = GameResult.IN_PROGRESS

    def action_to_move(self, action: int) -> Move:
        """Translate a discrete action into a board move."""
        action = int(action)
        if isinstance(self.board, DropBoard):
            return action
        return divmod(action, self.board.cols)

    def reset(self, seed: Optional[int] = None, options: Optional[Dict] = None) -> Tuple[np.ndarray, Dict]:
        """
        Reset the environment to initial state.

        Returns:
            Initial observation and info dictionary
        """
        debug.debug("Resetting environment", "env")
        super().reset(seed=seed)

        self.board.clear()
        self.moves_made = []
        self.result = GameResult.IN_PROGRESS

        if self.render_mode == "human":
            self.render()

        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        """
        Play the agent's move and the opponent's reply.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info)
        """
        if self.result.is_game_over():
            raise GameOverError("step() called on a finished episode; call reset()")

        move = self.action_to_move(action)
        debug.debug(f"Environment step with move {move!r}", "env")

        if not self.board.place(move, Mark.ONE):
            debug.warning(f"Invalid action: {action}", "env")
            info = self._get_info()
            info['invalid_move'] = True
            return self._get_observation(), self.reward_invalid_move, False, True, info

        self.moves_made.append(move)
        reward = self._settle()

        if not self.result.is_game_over():
            reply = self.opponent.get_move(self.board)
            if not self.board.place(reply, Mark.TWO):
                raise IllegalMoveError(f"Opponent {self.opponent!r} played illegal move {reply!r}")
            self.moves_made.append(reply)
            reward = self._settle()

        if self.render_mode == "human":
            self.render()

        terminated = self.result.is_game_over()
        return self._get_observation(), reward, terminated, False, self._get_info()

    def _settle(self) -> float:
        """Update the result after a move and return the agent's reward."""
        run = winning_run(self.board)
        if run is not None:
            self.result = GameResult.for_winner(run.mark)
            debug.info(f"Game over: {self.result.name}", "env")
            return self.reward_win if run.mark == Mark.ONE else self.reward_lose
        if not self.board.has_legal_move():
            self.result = GameResult.DRAW
            debug.info("Game over: Draw", "env")
            return self.reward_draw
        return self.reward_step

    def render(self) -> Optional[str]:
        if self.render_mode == "ascii":
            return self.board.render()
        if self.render_mode == "human":
            print(self.board.render())
        return None

    def _get_observation(self) -> np.ndarray:
        return self.board.snapshot()

    def _get_info(self) -> Dict:
        valid_moves = self.board.legal_moves()
        run = winning_run(self.board)

        return {
            'valid_moves': valid_moves,
            'num_valid_moves': len(valid_moves),
            'game_result': self.result.name,
            'moves_made': len(self.moves_made),
            'winning_line': list(run.cells) if run else [],
        }
