"""
Match-day tracker.

Live game session and lineup tracking: match clock, per-player playtime,
substitutions, goal log, substitution planning and the reconciliation of
in-progress and finished games.
"""
__version__ = "1.0.0"

__all__ = ["__version__"]
