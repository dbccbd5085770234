"""
Models package for the match-day tracker.

This package contains the core data models used throughout the application.
"""
from .game import (
    Game, GameEvent, PlayerLineupState, FieldPosition,
    Location, Side, TimerStatus, StorageClass, EventType, SessionState,
)
from .player import Player
from .saved_lineup import SavedLineup, LineupSlot
from .game_history import GameHistory
from .game_report import GameSummary, PlayerStatLine, SubstitutionRecord

__all__ = [
    "Game", "GameEvent", "PlayerLineupState", "FieldPosition",
    "Location", "Side", "TimerStatus", "StorageClass", "EventType", "SessionState",
    "Player", "SavedLineup", "LineupSlot", "GameHistory",
    "GameSummary", "PlayerStatLine", "SubstitutionRecord",
]
