# services/ui_service/app/session_gate.py
import logging
from typing import Optional

from core.auth import AuthProviderError, auth_state_from_session
from core.config import settings
from core.models import AuthState, Authenticated, Unauthenticated
from .notifications import NotificationCenter

logger = logging.getLogger("Uploadly_Core").getChild("UIService").getChild("SessionGate")


class SessionGate(NotificationCenter):
    """
    Decides whether the upload panel may render for this visitor.

    States: loading -> authenticated, loading -> unauthenticated (redirect),
    authenticated -> unauthenticated (redirect) when the session is lost.
    """

    def __init__(self, auth_provider, login_route: Optional[str] = None):
        super().__init__()
        self.auth = auth_provider
        self.login_route = login_route or settings.LOGIN_ROUTE
        self.loading = True
        self.user: AuthState = Unauthenticated()
        self.redirect_to: Optional[str] = None
        self._subscription = None

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self.user, Authenticated)

    def navigate(self, route: str) -> None:
        logger.info(f"Redirecting visitor to '{route}'.")
        self.redirect_to = route

    def consume_redirect(self) -> Optional[str]:
        """Returns the pending redirect target once, then clears it."""
        target, self.redirect_to = self.redirect_to, None
        return target

    async def mount(self) -> AuthState:
        await self.check_session()
        if self._subscription is None:
            self._subscription = self.auth.on_auth_state_change(self.on_session_change)
        return self.user

    def unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def check_session(self) -> AuthState:
        try:
            session = await self.auth.get_session()
        except AuthProviderError as e:
            logger.error(f"Session check failed: {e.message}")
            self.notify_error("Session check failed", "Could not verify your session. Please sign in again.")
            session = None
        except Exception as e:
            logger.error(f"Unexpected error during session check: {e}", exc_info=True)
            self.notify_error("Session check failed", "Could not verify your session. Please sign in again.")
            session = None

        self.user = auth_state_from_session(session)
        if not self.is_authenticated:
            self.navigate(self.login_route)
        self.loading = False
        return self.user

    def on_session_change(self, event: str, session) -> None:
        logger.debug(f"Auth state change: {event}")
        self.user = auth_state_from_session(session)
        if not self.is_authenticated:
            self.navigate(self.login_route)

    async def sign_out(self) -> bool:
        try:
            await self.auth.sign_out()
        except AuthProviderError as e:
            self.notify_error("Error signing out", e.message)
            return False
        except Exception as e:
            logger.error(f"Unexpected error during sign-out: {e}", exc_info=True)
            self.notify_error("Error signing out", str(e))
            return False
        self.notify("Signed out successfully", "You've been logged out.")
        return True
