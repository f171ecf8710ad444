"""
boardgames/ai/__init__.py - Move selection for board games

This module provides the minimax search engine and the players built on it.
"""

from boardgames.ai.minimax import NO_MOVE, MinimaxSearch, SearchConfig
from boardgames.ai.players import MinimaxPlayer, Player, RandomPlayer

__all__ = ['NO_MOVE', 'MinimaxSearch', 'SearchConfig',
           'MinimaxPlayer', 'Player', 'RandomPlayer']
