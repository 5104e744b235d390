from stayops.modules.reservations.reservations import (
    ReservationsManager,
    active_reservations,
    upcoming_reservations,
)

__all__ = ["ReservationsManager", "active_reservations", "upcoming_reservations"]
