import unittest
from unittest import mock

import numpy as np

from boardgames.ai import minimax as minimax_module
from boardgames.ai.minimax import NO_MOVE, MinimaxSearch, SearchConfig
from boardgames.ai.players import MinimaxPlayer, RandomPlayer
from boardgames.game.board import DropBoard, PlacementBoard
from boardgames.game.rules import GameSession
from boardgames.utils import (DEFAULT_SEARCH_DEPTH, WIN_SCORE, GameResult, Mark,
                              NoLegalMoveError)


def connect_four(*rows):
    return DropBoard.from_rows(["-------"] * (6 - len(rows)) + list(rows))


class TestSearchConfig(unittest.TestCase):
    def test_for_board(self):
        self.assertEqual(SearchConfig.for_board(DropBoard(), 3),
                         SearchConfig(max_depth=3, heuristic=True, pruning=True))
        self.assertEqual(SearchConfig.for_board(PlacementBoard()),
                         SearchConfig(max_depth=None, heuristic=False, pruning=True))
        self.assertEqual(SearchConfig.for_board(DropBoard()).max_depth, DEFAULT_SEARCH_DEPTH)

    def test_negative_depth_rejected(self):
        with self.assertRaises(ValueError):
            SearchConfig(max_depth=-1)


class TestTicTacToe(unittest.TestCase):
    def setUp(self):
        self.search = MinimaxSearch(SearchConfig.exhaustive())

    def test_takes_win_in_one(self):
        board = PlacementBoard.from_rows(["O--", "XX-", "--O"])
        self.assertEqual(self.search.choose_move(board, Mark.ONE), (1, 2))
        self.assertEqual(self.search.last_scores[(1, 2)], 2 * WIN_SCORE)

    def test_blocks_opponent(self):
        board = PlacementBoard.from_rows(["OO-", "-X-", "---"])
        self.assertEqual(self.search.choose_move(board, Mark.ONE), (0, 2))

    def test_prefers_winning_over_blocking(self):
        board = PlacementBoard.from_rows(["OO-", "XX-", "---"])
        self.assertEqual(self.search.choose_move(board, Mark.ONE), (1, 2))

    def test_plays_for_either_mark(self):
        board = PlacementBoard.from_rows(["XX-", "-O-", "---"])
        self.assertEqual(self.search.choose_move(board, Mark.TWO), (0, 2))

    def test_faster_loss_is_avoided(self):
        board = PlacementBoard.from_rows(["OO-", "-X-", "---"])
        self.search.choose_move(board, Mark.ONE)
        # Any move but the block loses on the opponent's next move
        for move, score in self.search.last_scores.items():
            if move != (0, 2):
                self.assertEqual(score, -2 * WIN_SCORE + 1)

    def test_minimax_value_of_full_board(self):
        board = PlacementBoard.from_rows(["XOX", "XOO", "OXX"])
        self.assertEqual(self.search.minimax(board, 9, True, Mark.ONE), 0)
        self.assertIs(self.search.choose_move(board, Mark.ONE), NO_MOVE)

    def test_board_unchanged_after_search(self):
        board = PlacementBoard.from_rows(["X--", "-O-", "---"])
        before = board.snapshot()
        self.search.choose_move(board, Mark.ONE)
        self.assertTrue(np.array_equal(board.grid, before))

    def test_self_play_from_empty_board_is_a_draw(self):
        session = GameSession(PlacementBoard(), MinimaxPlayer(Mark.ONE), MinimaxPlayer(Mark.TWO))
        self.assertEqual(session.play(), GameResult.DRAW)
        self.assertEqual(len(session.moves_made), 9)

    def test_never_loses_to_random_play(self):
        for seed in range(2):
            session = GameSession(PlacementBoard(), RandomPlayer(Mark.ONE, seed=seed), MinimaxPlayer(Mark.TWO))
            self.assertNotEqual(session.play(), GameResult.PLAYER_ONE_WIN)


class TestConnectFour(unittest.TestCase):
    def test_takes_win_in_one(self):
        board = connect_four("OO-----", "XXX----")
        search = MinimaxSearch(SearchConfig.depth_limited(1))
        self.assertEqual(search.choose_move(board, Mark.ONE), 3)
        self.assertEqual(search.last_scores[3], 2 * WIN_SCORE)

    def test_blocks_opponent(self):
        board = connect_four("XX-----", "OOO----")
        search = MinimaxSearch(SearchConfig.depth_limited(1))
        self.assertEqual(search.choose_move(board, Mark.ONE), 3)

    def test_depth_limit_counts_nodes(self):
        search = MinimaxSearch(SearchConfig.depth_limited(0))
        search.choose_move(DropBoard(), Mark.ONE)
        self.assertEqual(search.nodes_evaluated, 7)

        search = MinimaxSearch(SearchConfig.depth_limited(1))
        search.choose_move(DropBoard(), Mark.ONE)
        self.assertEqual(search.nodes_evaluated, 7 + 49)

    def test_heuristic_values_leaves_and_first_move_wins_ties(self):
        board = connect_four("--XX---")
        search = MinimaxSearch(SearchConfig.depth_limited(0))
        self.assertEqual(search.choose_move(board, Mark.ONE), 1)
        self.assertEqual(search.last_scores[1], search.last_scores[4])
        self.assertGreater(search.last_scores[1], search.last_scores[0])

    def test_without_config_uses_board_defaults(self):
        board = connect_four("OO-----", "XXX----")
        search = MinimaxSearch()
        self.assertEqual(search.choose_move(board, Mark.ONE), 3)

    def test_deterministic(self):
        board = connect_four("---O---", "--XXO--")
        config = SearchConfig.depth_limited(2)
        first = MinimaxSearch(config).choose_move(board, Mark.ONE)
        search = MinimaxSearch(config)
        for _ in range(3):
            self.assertEqual(search.choose_move(board, Mark.ONE), first)

    def test_board_unchanged_after_search(self):
        board = connect_four("---O---", "--XXO--")
        before = board.snapshot()
        MinimaxSearch(SearchConfig.depth_limited(2)).choose_move(board, Mark.TWO)
        self.assertTrue(np.array_equal(board.grid, before))

    def test_board_unchanged_after_aborted_search(self):
        board = connect_four("---O---", "--XXO--")
        before = board.snapshot()
        calls = []
        real_terminal_score = minimax_module.terminal_score

        def failing_terminal_score(*args):
            calls.append(args)
            if len(calls) > 20:
                raise RuntimeError("search aborted")
            return real_terminal_score(*args)

        with mock.patch.object(minimax_module, 'terminal_score', side_effect=failing_terminal_score):
            with self.assertRaises(RuntimeError):
                MinimaxSearch(SearchConfig.depth_limited(3)).choose_move(board, Mark.ONE)

        self.assertTrue(np.array_equal(board.grid, before))
        self.assertTrue(board.is_settled())

    def test_no_legal_move(self):
        board = DropBoard.from_rows(["XO", "OX"], connect_n=3)
        search = MinimaxSearch(SearchConfig.depth_limited(2))
        self.assertIs(search.choose_move(board, Mark.ONE), NO_MOVE)
        with self.assertRaises(NoLegalMoveError):
            MinimaxPlayer(Mark.ONE).get_move(board)


class TestPruning(unittest.TestCase):
    def assert_same_choice(self, board, mark, plain, pruned):
        full = MinimaxSearch(plain)
        cut = MinimaxSearch(pruned)
        move = full.choose_move(board, mark)

        self.assertEqual(cut.choose_move(board, mark), move)
        self.assertEqual(cut.last_scores[move], full.last_scores[move])
        self.assertLess(cut.nodes_evaluated, full.nodes_evaluated)
        # Pruned root scores bound the exact ones from above and never beat the best
        for other, score in cut.last_scores.items():
            self.assertGreaterEqual(score, full.last_scores[other])
            self.assertLessEqual(score, cut.last_scores[move])

    def test_connect_four(self):
        board = connect_four("---O---", "--XXO--")
        for mark in (Mark.ONE, Mark.TWO):
            self.assert_same_choice(board, mark, SearchConfig.depth_limited(3),
                                    SearchConfig.depth_limited(3, pruning=True))

    def test_connect_four_ties(self):
        self.assert_same_choice(connect_four("--XX---"), Mark.TWO, SearchConfig.depth_limited(2),
                                SearchConfig.depth_limited(2, pruning=True))

    def test_tic_tac_toe(self):
        for rows, mark in ((("X--", "-O-", "---"), Mark.ONE), (("OO-", "-X-", "---"), Mark.ONE),
                           (("X--", "---", "---"), Mark.TWO)):
            self.assert_same_choice(PlacementBoard.from_rows(rows), mark, SearchConfig.exhaustive(),
                                    SearchConfig.exhaustive(pruning=True))

    def test_board_unchanged(self):
        board = connect_four("---O---", "--XXO--")
        before = board.snapshot()
        MinimaxSearch(SearchConfig.depth_limited(4, pruning=True)).choose_move(board, Mark.ONE)
        self.assertTrue(np.array_equal(board.grid, before))


class TestRandomPlayer(unittest.TestCase):
    def test_seeded_moves_are_legal_and_repeatable(self):
        board = connect_four("XOXOXOX")
        first = [RandomPlayer(Mark.ONE, seed=3).get_move(board) for _ in range(5)]
        second = [RandomPlayer(Mark.ONE, seed=3).get_move(board) for _ in range(5)]
        self.assertEqual(first, second)
        self.assertTrue(all(board.is_legal(move) for move in first))

    def test_full_board(self):
        with self.assertRaises(NoLegalMoveError):
            RandomPlayer(Mark.TWO).get_move(PlacementBoard.from_rows(["XOX", "XOO", "OXX"]))


if __name__ == '__main__':
    unittest.main()
