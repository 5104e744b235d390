from stayops.modules.dashboard.dashboard import DashboardManager

__all__ = ["DashboardManager"]
