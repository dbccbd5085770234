#!/usr/bin/env python3
"""
Main entry point for the match-day tracker web API.

This script launches the Flask-based web server using the settings read from
``MATCHDAY_*`` environment variables or a ``.env`` file.
"""
from matchday.ui.web_app import run_web_app

if __name__ == "__main__":
    run_web_app()
