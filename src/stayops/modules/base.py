"""State shared by every screen manager."""

from __future__ import annotations

import logging
from uuid import UUID

from stayops.backend import Backend
from stayops.events import EventBus, event_bus
from stayops.exceptions import BackendError
from stayops.models.profile import UserProfile, UserRole
from stayops.models.property import Property

logger = logging.getLogger(__name__)


class ScreenManager:
    """Published state for one screen: loading flag, error text, lookups.

    Loads capture a generation number when they start; ``cancel()`` bumps it so
    results that arrive after the screen went away are dropped.
    """

    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        self.backend = backend
        self.events = events or event_bus
        self.is_loading = False
        self.error_message: str | None = None
        self.property_names: dict[UUID, str] = {}
        self.reporter_names: dict[UUID, str] = {}
        self._generation = 0

    def cancel(self) -> None:
        """Discard the results of any load still in flight."""
        self._generation += 1

    def _begin(self) -> int:
        return self._generation

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    # --- Lookups used by most screens ---

    def _fetch_properties(self, *, use_display_name: bool = True) -> list[Property]:
        rows = self.backend.fetch(self.backend.table("properties").select("*"))
        properties = Property.from_rows(rows)
        self.property_names = {
            p.id: (p.display_name if use_display_name else p.name) for p in properties
        }
        return properties

    def _load_reporter_names(self) -> list[UserProfile]:
        try:
            rows = self.backend.fetch(self.backend.table("profiles").select("*"))
        except BackendError:
            logger.exception("Error loading profiles")
            return []
        profiles = UserProfile.from_rows(rows)
        self.reporter_names = {p.id: p.full_name for p in profiles}
        return profiles

    def property_name(self, property_id: UUID) -> str | None:
        return self.property_names.get(property_id)

    def reporter_name(self, reporter_id: UUID) -> str | None:
        return self.reporter_names.get(reporter_id)

    def current_role(self) -> UserRole | None:
        """Role of the signed-in user, or None when it cannot be read."""
        try:
            user_id = self.backend.current_user_id()
            row = self.backend.fetch_one(
                self.backend.table("profiles").select("role").eq("id", user_id)
            )
        except BackendError:
            logger.warning("Could not read the current user's role")
            return None
        if not row or not row.get("role"):
            return None
        try:
            return UserRole(row["role"])
        except ValueError:
            logger.warning("Unknown role %r", row["role"])
            return None
