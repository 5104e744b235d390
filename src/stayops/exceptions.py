"""Exception hierarchy shared by the backend gateway and the screen managers."""


class StayOpsError(Exception):
    """Base class for all StayOps errors."""


class BackendError(StayOpsError):
    """A remote table, storage or function call failed."""


class NetworkError(BackendError):
    """The backend could not be reached (connect, timeout, transport)."""


class AuthenticationError(BackendError):
    """The backend rejected the credentials or the session expired."""


class NotAuthenticatedError(AuthenticationError):
    """No signed-in session is available."""


class RemoteFunctionError(BackendError):
    """A serverless function returned an error response."""


class ValidationError(StayOpsError):
    """Input rejected locally before any remote call is made."""


class CleaningWindowError(ValidationError):
    """A proposed cleaning time falls outside its allowed window."""
