#!/usr/bin/env python3
"""
run.py - Main entry point for the minimax board games

Examples:
    python run.py play --game tictactoe
    python run.py play --game connect4 --depth 5 --ai-first
    python run.py analyze --game tictactoe --position 'XX-/OO-/---' --mark X
    python run.py analyze --game tictactoe --position=-X-/-O-/--- --mark O
    python run.py analyze --game tictactoe --position '.X./.O./...' --mark O
    python run.py benchmark --game connect4 --depth 3 --iterations 10
"""

import sys

from boardgames.interfaces.cli import main

if __name__ == "__main__":
    sys.exit(main())
