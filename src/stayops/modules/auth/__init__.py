from stayops.modules.auth.session import AccessState, ApprovalWatcher, AuthManager

__all__ = ["AccessState", "ApprovalWatcher", "AuthManager"]
