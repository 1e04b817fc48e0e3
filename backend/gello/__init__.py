"""Gello: team task boards with points, leaderboards and a points shop."""

__version__ = "0.1.0"
