import io
import unittest
from contextlib import redirect_stdout
from unittest import mock

from boardgames.game.board import DropBoard, PlacementBoard
from boardgames.interfaces.cli import (ConsolePlayer, QuitGame, SimpleCLI,
                                       main, parse_position)
from boardgames.utils import GameVariant, Mark


def scripted_input(*answers):
    answers = list(answers)
    return lambda prompt: answers.pop(0)


class TestConsolePlayer(unittest.TestCase):
    def test_parse_column(self):
        self.assertEqual(ConsolePlayer.parse_move(DropBoard(), " 3 "), 3)
        for text in ("7", "-1", "a", "1 2", ""):
            with self.assertRaises(ValueError):
                ConsolePlayer.parse_move(DropBoard(), text)

    def test_parse_cell(self):
        board = PlacementBoard()
        self.assertEqual(ConsolePlayer.parse_move(board, "1 2"), (1, 2))
        self.assertEqual(ConsolePlayer.parse_move(board, "0,2"), (0, 2))
        for text in ("3 0", "1", "x y", "1 2 0"):
            with self.assertRaises(ValueError):
                ConsolePlayer.parse_move(board, text)

    def test_prompts_until_move_is_legal(self):
        board = PlacementBoard.from_rows(["X--", "---", "---"])
        messages = []
        player = ConsolePlayer(Mark.TWO, input_fn=scripted_input("oops", "0 0", "2 2"),
                               output_fn=messages.append)
        self.assertEqual(player.get_move(board), (2, 2))
        self.assertEqual(len(messages), 2)
        self.assertIn("not available", messages[1])

    def test_quit(self):
        player = ConsolePlayer(Mark.ONE, input_fn=scripted_input("Q"), output_fn=lambda text: None)
        with self.assertRaises(QuitGame):
            player.get_move(DropBoard())


class TestParsePosition(unittest.TestCase):
    def test_tic_tac_toe(self):
        board = parse_position(GameVariant.TIC_TAC_TOE, "XO-/-X-/--O")
        self.assertIsInstance(board, PlacementBoard)
        self.assertEqual(board.get(2, 2), Mark.TWO)

    def test_connect_four(self):
        board = parse_position(GameVariant.CONNECT_FOUR, "-------/" * 5 + "--XO---")
        self.assertIsInstance(board, DropBoard)
        self.assertEqual(board.get(5, 3), Mark.TWO)


class TestSimpleCLI(unittest.TestCase):
    def setUp(self):
        self.output = []
        self.cli = SimpleCLI(output_fn=self.output.append)

    def text(self):
        return "\n".join(str(line) for line in self.output)

    def test_analyze_finds_best_move(self):
        code = self.cli.run(['analyze', '--game', 'tictactoe', '--position', 'OO-/XX-/---', '--mark', 'X'])
        self.assertEqual(code, 0)
        self.assertIn("Winner: none", self.text())
        self.assertIn("Best move for X: (1, 2)", self.text())

    def test_analyze_finished_position(self):
        code = self.cli.run(['analyze', '--game', 'tictactoe', '--position', 'XXX/OO-/---'])
        self.assertEqual(code, 0)
        self.assertIn("Winner: X", self.text())
        self.assertNotIn("Best move", self.text())

    def test_analyze_position_starting_with_empty_cell(self):
        code = self.cli.run(['analyze', '--game', 'tictactoe', '--position=-X-/-O-/---', '--mark', 'X'])
        self.assertEqual(code, 0)
        self.assertIn("Best move for X:", self.text())

        dashes = self.text()
        self.output.clear()
        self.assertEqual(self.cli.run(['analyze', '--game', 'tictactoe', '--position', '.X./.O./...', '--mark', 'X']), 0)
        self.assertEqual(self.text(), dashes)

    def test_analyze_bad_position(self):
        code = self.cli.run(['analyze', '--game', 'connect4', '--position=--X/---'])
        self.assertEqual(code, 2)
        self.assertIn("Error parsing position", self.text())

    def test_ai_vs_ai(self):
        code = self.cli.run(['play', '--game', 'connect4', '--depth', '0', '--ai-vs-ai'])
        self.assertEqual(code, 0)
        self.assertIn("Starting a new connect4 game!", self.text())
        self.assertIn("Game over!", self.text())

    def test_quit_during_play(self):
        with mock.patch('builtins.input', side_effect=['q']):
            code = self.cli.run(['play', '--game', 'tictactoe'])
        self.assertEqual(code, 0)
        self.assertIn("Quitting game.", self.text())

    def test_human_game(self):
        # X takes the centre, then plays wherever is free until the game ends
        answers = ['1 1'] + ['%d %d' % (r, c) for r in range(3) for c in range(3)]
        with mock.patch('builtins.input', side_effect=answers):
            code = self.cli.run(['play', '--game', 'tictactoe'])
        self.assertEqual(code, 0)
        self.assertIn("Game over!", self.text())
        self.assertNotIn("X wins!", self.text())

    def test_benchmark(self):
        code = self.cli.run(['benchmark', '--game', 'connect4', '--depth', '1', '--iterations', '2'])
        self.assertEqual(code, 0)
        self.assertIn("Searched", self.text())

    def test_no_command(self):
        self.assertEqual(self.cli.run([]), 1)

    def test_main(self):
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            self.assertEqual(main(['analyze', '--game', 'tictactoe', '--position', 'X--/---/---', '--mark', 'O']), 0)
        self.assertIn("Best move for O:", stdout.getvalue())


if __name__ == '__main__':
    unittest.main()
