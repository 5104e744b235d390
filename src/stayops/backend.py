"""Supabase gateway: query execution, serverless functions, storage and auth.

Every remote call made by a screen manager goes through :class:`Backend` so
that library exceptions are translated into the :mod:`stayops.exceptions`
hierarchy in one place.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

import httpx
from supabase import (
    AuthError,
    Client,
    FunctionsError,
    PostgrestAPIError,
    StorageException,
    create_client,
)

from stayops.config import get_backend_credentials
from stayops.exceptions import (
    AuthenticationError,
    BackendError,
    NetworkError,
    NotAuthenticatedError,
    RemoteFunctionError,
)

logger = logging.getLogger(__name__)

# PostgREST codes for a missing/expired JWT
_AUTH_ERROR_CODES = {"PGRST301", "PGRST302", "42501"}


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise library exceptions as StayOps errors."""
    try:
        yield
    except httpx.TransportError as exc:
        raise NetworkError(f"{action}: {exc}") from exc
    except AuthError as exc:
        raise AuthenticationError(f"{action}: {exc}") from exc
    except PostgrestAPIError as exc:
        if getattr(exc, "code", None) in _AUTH_ERROR_CODES:
            raise AuthenticationError(f"{action}: {exc.message}") from exc
        raise BackendError(f"{action}: {exc.message or exc}") from exc
    except FunctionsError as exc:
        raise RemoteFunctionError(f"{action}: {exc}") from exc
    except (StorageException, httpx.HTTPStatusError) as exc:
        raise BackendError(f"{action}: {exc}") from exc


class Backend:
    """Thin wrapper around a ``supabase.Client`` bound to one user session."""

    def __init__(self, client: Client) -> None:
        self.client = client

    @classmethod
    def with_session(cls, access_token: str, refresh_token: str) -> Backend:
        """Create a backend that acts on behalf of an existing session."""
        backend = create_backend()
        with translate_errors("Restoring session"):
            backend.client.auth.set_session(access_token, refresh_token)
        return backend

    # --- Tables ---

    def table(self, name: str):
        """Start a PostgREST query against ``name``."""
        return self.client.table(name)

    def fetch(self, query) -> list[dict[str, Any]]:
        """Execute a query builder and return its rows."""
        with translate_errors("Query failed"):
            response = query.execute()
        return list(response.data or [])

    def fetch_one(self, query) -> dict[str, Any] | None:
        """Execute a query expected to match at most one row."""
        rows = self.fetch(query.limit(1))
        return rows[0] if rows else None

    # --- Functions ---

    def invoke(self, function_name: str, body: dict[str, Any]) -> Any:
        """Invoke a serverless function with a JSON body."""
        logger.info("Invoking function %s", function_name)
        with translate_errors(f"Function {function_name} failed"):
            return self.client.functions.invoke(function_name, invoke_options={"body": body})

    # --- Storage ---

    def upload(self, bucket: str, path: str, data: bytes, content_type: str = "image/jpeg") -> None:
        """Upload a new object; existing paths are never overwritten."""
        with translate_errors(f"Upload to {bucket}/{path} failed"):
            self.client.storage.from_(bucket).upload(
                path,
                data,
                file_options={"content-type": content_type, "upsert": "false"},
            )

    def public_url(self, bucket: str, path: str) -> str:
        with translate_errors(f"Public URL for {bucket}/{path} failed"):
            return str(self.client.storage.from_(bucket).get_public_url(path))

    # --- Auth ---

    def sign_in(self, email: str, password: str):
        with translate_errors("Sign in failed"):
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        return response.session

    def sign_up(self, email: str, password: str) -> str:
        """Create an auth user and return its id."""
        with translate_errors("Sign up failed"):
            response = self.client.auth.sign_up({"email": email, "password": password})
        if response.user is None:
            raise AuthenticationError("Sign up failed: no user returned")
        return str(response.user.id)

    def sign_out(self) -> None:
        with translate_errors("Sign out failed"):
            self.client.auth.sign_out()

    def session(self):
        """Return the current auth session, or None when signed out."""
        with translate_errors("Session lookup failed"):
            return self.client.auth.get_session()

    def current_user_id(self) -> str:
        session = self.session()
        if session is None or session.user is None:
            raise NotAuthenticatedError("No active session")
        return str(session.user.id)


def create_backend() -> Backend:
    """Build a backend from SUPABASE_URL / SUPABASE_KEY."""
    url, key = get_backend_credentials()
    return Backend(create_client(url, key))
