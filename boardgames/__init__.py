"""
boardgames - Minimax play for gravity-drop and free-placement board games

This package provides Connect Four style gravity-drop boards and Tic-Tac-Toe
style free-placement boards, a shared line scanner and evaluator, a minimax
search engine with its move selector, and a console game loop.
"""

# Version number
__version__ = '0.1.0'
