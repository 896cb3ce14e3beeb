import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from core.auth import AuthProviderError
from core.models import Authenticated, Unauthenticated
from services.ui_service.app.session_gate import SessionGate


def make_session(user_id="user-123", email="ada@example.com", token="access-token"):
    return SimpleNamespace(access_token=token, refresh_token="refresh-token",
                           user=SimpleNamespace(id=user_id, email=email))


@pytest.fixture
def subscription():
    return MagicMock()

@pytest.fixture
def mock_auth(subscription):
    auth = MagicMock()
    auth.get_session = AsyncMock(return_value=make_session())
    auth.sign_out = AsyncMock(return_value=None)
    auth.on_auth_state_change = MagicMock(return_value=subscription)
    return auth

@pytest.fixture
def gate(mock_auth):
    return SessionGate(mock_auth, login_route="/auth")


def test_gate_starts_loading(gate):
    assert gate.loading is True
    assert isinstance(gate.user, Unauthenticated)
    assert gate.redirect_to is None

@pytest.mark.asyncio
async def test_mount_with_session_authenticates_and_subscribes(gate, mock_auth):
    user = await gate.mount()

    assert isinstance(user, Authenticated)
    assert user.user_id == "user-123"
    assert user.access_token == "access-token"
    assert user.email == "ada@example.com"
    assert gate.loading is False
    assert gate.consume_redirect() is None
    mock_auth.on_auth_state_change.assert_called_once_with(gate.on_session_change)

@pytest.mark.asyncio
async def test_mount_without_session_redirects_to_login(gate, mock_auth):
    mock_auth.get_session.return_value = None

    await gate.mount()

    assert not gate.is_authenticated
    assert gate.loading is False
    assert gate.consume_redirect() == "/auth"
    assert gate.consume_redirect() is None

@pytest.mark.asyncio
async def test_session_check_failure_notifies_and_redirects(gate, mock_auth):
    mock_auth.get_session.side_effect = AuthProviderError("Service unavailable")

    await gate.check_session()

    assert not gate.is_authenticated
    assert gate.redirect_to == "/auth"
    notes = gate.drain_notifications()
    assert notes[0].title == "Session check failed"
    assert notes[0].is_error

@pytest.mark.asyncio
async def test_mount_subscribes_only_once(gate, mock_auth):
    await gate.mount()
    await gate.mount()
    mock_auth.on_auth_state_change.assert_called_once()

@pytest.mark.asyncio
async def test_unmount_unsubscribes(gate, subscription):
    await gate.mount()
    gate.unmount()
    gate.unmount()
    subscription.unsubscribe.assert_called_once()


# --- on_session_change ---

@pytest.mark.asyncio
async def test_session_loss_redirects(gate):
    await gate.mount()

    gate.on_session_change("SIGNED_OUT", None)

    assert isinstance(gate.user, Unauthenticated)
    assert gate.redirect_to == "/auth"

@pytest.mark.asyncio
async def test_token_refresh_keeps_user_signed_in(gate):
    await gate.mount()

    gate.on_session_change("TOKEN_REFRESHED", make_session(token="new-token"))

    assert gate.is_authenticated
    assert gate.user.access_token == "new-token"
    assert gate.redirect_to is None


# --- sign_out ---

@pytest.mark.asyncio
async def test_sign_out_failure_shows_provider_message(gate, mock_auth):
    await gate.mount()
    mock_auth.sign_out.side_effect = AuthProviderError("network error")

    assert await gate.sign_out() is False

    notes = gate.drain_notifications()
    assert len(notes) == 1
    assert notes[0].title == "Error signing out"
    assert notes[0].description == "network error"
    assert notes[0].is_error
    assert gate.is_authenticated
    assert gate.user.user_id == "user-123"
    assert gate.redirect_to is None

@pytest.mark.asyncio
async def test_sign_out_success_confirms_and_follows_session_event(gate, mock_auth):
    await gate.mount()

    def provider_sign_out():
        gate.on_session_change("SIGNED_OUT", None)
    mock_auth.sign_out.side_effect = provider_sign_out

    assert await gate.sign_out() is True

    notes = gate.drain_notifications()
    assert notes[0].title == "Signed out successfully"
    assert notes[0].description == "You've been logged out."
    assert not notes[0].is_error
    assert gate.consume_redirect() == "/auth"
