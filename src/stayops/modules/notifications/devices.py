"""Push-token registration for the signed-in user's device."""

from __future__ import annotations

import logging
import platform

from stayops.backend import Backend
from stayops.exceptions import BackendError
from stayops.models.notification import Device

logger = logging.getLogger(__name__)


class DeviceRegistrar:
    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    def register(
        self,
        token: bytes,
        platform_name: str = "ios",
        device_name: str | None = None,
        os_version: str | None = None,
    ) -> Device | None:
        """Upsert this device's token; one row per user. Failures are only logged."""
        try:
            user_id = self.backend.current_user_id()
        except BackendError:
            logger.warning("Not registering device: no active session")
            return None

        device = Device(
            user_id=user_id,
            push_token=token.hex(),
            platform=platform_name,
            notifications_enabled=True,
            device_name=device_name or platform.node(),
            os_version=os_version or platform.release(),
        )
        try:
            self.backend.fetch(
                self.backend.table("devices").upsert(device.to_row(), on_conflict="user_id")
            )
        except BackendError:
            logger.exception("Error registering device")
            return None
        logger.info("Registered push token for user %s", user_id)
        return device
