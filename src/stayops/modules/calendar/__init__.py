from stayops.modules.calendar.month import (
    CalendarDay,
    CalendarManager,
    month_grid,
    parse_listing_feed,
)

__all__ = ["CalendarDay", "CalendarManager", "month_grid", "parse_listing_feed"]
