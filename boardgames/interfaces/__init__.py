"""
boardgames.interfaces - User interfaces for boardgames

This package contains the command-line interface and the console player.
"""
