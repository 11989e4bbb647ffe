"""Command line client and terminal board renderer for Nodots Backgammon."""

__version__ = "0.3.0"
