from stayops.modules.cleaning.schedules import (
    CleaningManager,
    active_cleanings,
    order_for_display,
    reservations_needing_cleaning,
    upcoming_cleanings,
)
from stayops.modules.cleaning.windows import (
    CleaningWindow,
    cleaning_window,
    default_proposal,
    next_check_in,
    previous_checkout,
    validate_times,
    validation_error,
)

__all__ = [
    "CleaningManager",
    "CleaningWindow",
    "active_cleanings",
    "cleaning_window",
    "default_proposal",
    "next_check_in",
    "order_for_display",
    "previous_checkout",
    "reservations_needing_cleaning",
    "upcoming_cleanings",
    "validate_times",
    "validation_error",
]
