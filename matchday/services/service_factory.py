"""
Service factory for dependency injection.

This module builds the stores, roster, draft and controller of one team from
the application settings, so the web layer and the tests wire them the same
way.
"""
from typing import Optional

from ..config import AppSettings, get_settings
from .lineup_templates import LineupDraft, SavedLineupService
from .persistence_service import DurableStore, VolatileStore, create_durable_store
from .roster_service import Roster
from .session_controller import SessionController


class ServiceFactory:
    """
    Factory for creating service instances with their dependencies injected.

    Stores, roster and draft are created once per factory and shared by every
    service built from it.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        """
        Initialize factory.

        Args:
            settings: Settings to build from (defaults to the cached settings)
        """
        self.settings = settings or get_settings()
        self._volatile_store: Optional[VolatileStore] = None
        self._durable_store: Optional[DurableStore] = None
        self._roster: Optional[Roster] = None
        self._draft: Optional[LineupDraft] = None

    def create_session_controller(self) -> SessionController:
        """
        Create a SessionController and load its games.

        Returns:
            Configured SessionController instance
        """
        controller = SessionController(
            team_id=self.settings.TEAM_ID,
            volatile_store=self._get_volatile_store(),
            durable_store=self._get_durable_store(),
            roster=self._get_roster(),
        )
        controller.load()
        return controller

    def create_saved_lineup_service(self) -> SavedLineupService:
        """
        Create SavedLineupService over the shared draft and durable store.

        Returns:
            Configured SavedLineupService instance with templates loaded
        """
        service = SavedLineupService(
            store=self._get_durable_store(),
            team_id=self.settings.TEAM_ID,
            draft=self._get_draft(),
        )
        service.refresh()
        return service

    def create_complete_service_suite(self) -> dict:
        """
        Create every service the application needs.

        Returns:
            Dictionary containing all configured services
        """
        return {
            'controller': self.create_session_controller(),
            'lineups': self.create_saved_lineup_service(),
            'roster': self._get_roster(),
            'draft': self._get_draft(),
        }

    def _get_volatile_store(self) -> VolatileStore:
        """Get singleton volatile store."""
        if self._volatile_store is None:
            self._volatile_store = VolatileStore(self.settings.DATA_DIR, self.settings.TEAM_ID)
        return self._volatile_store

    def _get_durable_store(self) -> DurableStore:
        """Get singleton durable store."""
        if self._durable_store is None:
            self._durable_store = create_durable_store(self.settings)
        return self._durable_store

    def _get_roster(self) -> Roster:
        """Get singleton roster; the draft follows its deletions."""
        if self._roster is None:
            self._roster = Roster()
            self._roster.subscribe(lambda player_id: self._get_draft().remove(player_id))
        return self._roster

    def _get_draft(self) -> LineupDraft:
        """Get singleton lineup draft."""
        if self._draft is None:
            self._draft = LineupDraft()
        return self._draft

    def configure_custom_durable_store(self, store: DurableStore) -> None:
        """Use ``store`` instead of the configured durable backend."""
        self._durable_store = store
