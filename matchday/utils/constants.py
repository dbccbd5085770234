"""
Constants for the match-day tracker.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Matchday Tracker"

# Player locations within a game or the planning draft
LOCATION_BENCH = "bench"
LOCATION_FIELD = "field"
LOCATION_INACTIVE = "inactive"

# Locations where a player's playtime keeps accruing while the clock runs
PLAYTIME_LOCATIONS = (LOCATION_FIELD, LOCATION_INACTIVE)

# Sides of the scoreline
SIDE_HOME = "home"
SIDE_AWAY = "away"

# Season / competition history kept for form suggestions
HISTORY_MAX_ENTRIES = 20

# Field coordinates are percentages of the pitch
MIN_COORDINATE = 0.0
MAX_COORDINATE = 100.0

# Storage file names (relative to the per-team data directory)
ACTIVE_GAMES_FILE = "active_games.json"
HISTORY_FILE = "history.json"
DURABLE_DIR = "durable"
DURABLE_GAMES_DIR = "games"
DURABLE_TEMPLATES_DIR = "lineups"
