# core/auth.py
"""
Auth provider adapter over Supabase Auth.

Exposes the three calls the session gate relies on (get_session,
on_auth_state_change, sign_out) plus password sign-in for the login route.
Blocking supabase-py calls run in worker threads. Token refresh only happens
through refresh_session(), called from the login route that owns the cookies.
"""
import asyncio
from typing import Callable, Optional

import httpx
from supabase import Client, AuthApiError, AuthError, AuthSessionMissingError

from core.config import logger as core_logger
from core.models import AuthState, Authenticated, Unauthenticated

logger = core_logger.getChild("Auth")


class AuthProviderError(Exception):
    """Raised when Supabase Auth cannot complete a request."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def auth_state_from_session(session) -> AuthState:
    """Maps a Supabase session (or None) onto the explicit auth state."""
    if session is None or getattr(session, "user", None) is None:
        return Unauthenticated()
    return Authenticated(
        user_id=str(session.user.id),
        access_token=session.access_token,
        email=getattr(session.user, "email", None),
    )


class SupabaseAuthProvider:
    """
    Wraps the auth half of a per-visitor Supabase client.

    Args:
        client: A client dedicated to this visitor.
        access_token: Access token read from the visitor's cookie,
            used to restore the session on the first get_session() call.
    """

    def __init__(self, client: Client, access_token: Optional[str] = None):
        self.client = client
        self._access_token = access_token

    async def get_session(self):
        """
        Returns the current session, restoring it from the cookie access token once.

        The refresh token is never handed to this client: refreshing rotates it,
        and only the login route can write the rotated pair back to the cookies.
        An expired access token therefore means no session here.
        """
        def fetch():
            session = self.client.auth.get_session()
            if session is None and self._access_token:
                try:
                    response = self.client.auth.set_session(self._access_token, "")
                    session = response.session
                except (AuthApiError, AuthSessionMissingError) as e:
                    # Expired or revoked tokens simply mean there is no session
                    logger.info(f"Stored access token rejected: {e.message}")
                    session = None
                except ValueError as e:
                    # Malformed cookie; pydantic's ValidationError is a ValueError
                    logger.info(f"Stored access token unreadable: {e}")
                    session = None
                finally:
                    self._access_token = None
            return session

        try:
            return await asyncio.to_thread(fetch)
        except (AuthError, httpx.HTTPError) as e:
            message = getattr(e, "message", None) or str(e)
            logger.error(f"Session lookup failed: {message}")
            raise AuthProviderError(message) from e

    def on_auth_state_change(self, callback: Callable[[str, object], None]):
        """Registers callback(event, session); returns a subscription with unsubscribe()."""
        return self.client.auth.on_auth_state_change(callback)

    async def sign_out(self) -> None:
        try:
            await asyncio.to_thread(self.client.auth.sign_out)
        except (AuthError, httpx.HTTPError) as e:
            message = getattr(e, "message", None) or str(e)
            logger.error(f"Sign-out failed: {message}")
            raise AuthProviderError(message) from e
        logger.info("Signed out.")

    async def sign_in_with_password(self, email: str, password: str):
        credentials = {"email": email, "password": password}
        try:
            response = await asyncio.to_thread(self.client.auth.sign_in_with_password, credentials)
        except (AuthError, httpx.HTTPError) as e:
            message = getattr(e, "message", None) or str(e)
            logger.warning(f"Sign-in failed for '{email}': {message}")
            raise AuthProviderError(message) from e
        logger.info(f"Signed in '{email}'.")
        return response.session

    async def refresh_session(self, refresh_token: str):
        """Exchanges a refresh token for a new session. The old refresh token is spent."""
        try:
            response = await asyncio.to_thread(self.client.auth.refresh_session, refresh_token)
        except (AuthApiError, AuthSessionMissingError) as e:
            logger.info(f"Refresh token rejected: {e.message}")
            return None
        except (AuthError, httpx.HTTPError) as e:
            message = getattr(e, "message", None) or str(e)
            logger.error(f"Session refresh failed: {message}")
            raise AuthProviderError(message) from e
        return response.session
