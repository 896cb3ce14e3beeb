# services/ui_service/app/auth_routes.py
import html
import logging

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from core.auth import AuthProviderError, SupabaseAuthProvider
from core.config import settings
from core.supabase_client import create_supabase_client

logger = logging.getLogger("Uploadly_Core").getChild("UIService").getChild("AuthRouter")

router = APIRouter(tags=["Auth"])

LOGIN_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Uploadly - Sign in</title></head>
<body style="font-family: sans-serif; max-width: 360px; margin: 80px auto;">
  <h1>Uploadly</h1>
  <p>Sign in to upload images.</p>
  {error}
  <form method="post" action="{action}">
    <p><input type="email" name="email" placeholder="Email" required style="width: 100%;"></p>
    <p><input type="password" name="password" placeholder="Password" required style="width: 100%;"></p>
    <p><button type="submit">Sign in</button></p>
  </form>
</body>
</html>
"""


def render_login_page(error: str | None = None) -> str:
    error_html = f'<p style="color: #b91c1c;">{html.escape(error)}</p>' if error else ""
    return LOGIN_PAGE.format(error=error_html, action=settings.LOGIN_ROUTE)


def clear_session_cookies(response) -> None:
    response.delete_cookie(settings.ACCESS_TOKEN_COOKIE, path="/")
    response.delete_cookie(settings.REFRESH_TOKEN_COOKIE, path="/")


def set_session_cookies(response, session) -> None:
    cookie_options = {"httponly": True, "secure": settings.COOKIE_SECURE, "samesite": "lax", "path": "/"}
    response.set_cookie(settings.ACCESS_TOKEN_COOKIE, session.access_token, **cookie_options)
    response.set_cookie(settings.REFRESH_TOKEN_COOKIE, session.refresh_token, **cookie_options)


async def get_auth_provider() -> SupabaseAuthProvider | None:
    try:
        client = await create_supabase_client()
    except ValueError as e:
        logger.error(f"Configuration error: {e}. SUPABASE_URL/SUPABASE_KEY might be missing in .env")
        return None
    except Exception as e:
        logger.error(f"Failed to get Supabase client: {e}", exc_info=True)
        return None
    return SupabaseAuthProvider(client)


@router.get(settings.LOGIN_ROUTE, response_class=HTMLResponse)
async def login_page(request: Request, signed_out: bool = False):
    """
    Login view the session gate redirects to.

    This is the only place a refresh token is spent: when the refresh cookie
    still works the rotated pair is written back and the visitor goes straight
    back to the UI. Otherwise, or right after a sign-out, the stale cookies are
    dropped and the form shown.
    """
    refresh_token = request.cookies.get(settings.REFRESH_TOKEN_COOKIE)
    if refresh_token and not signed_out:
        provider = await get_auth_provider()
        session = None
        if provider is not None:
            try:
                session = await provider.refresh_session(refresh_token)
            except AuthProviderError as e:
                logger.warning(f"Could not refresh session, showing login form: {e.message}")
        if session is not None:
            logger.info("Session refreshed from cookie; returning visitor to the UI.")
            response = RedirectResponse(url=settings.UI_PATH, status_code=303)
            set_session_cookies(response, session)
            return response

    response = HTMLResponse(render_login_page())
    clear_session_cookies(response)
    return response


@router.post(settings.LOGIN_ROUTE)
async def login(email: str = Form(...), password: str = Form(...)):
    provider = await get_auth_provider()
    if provider is None:
        return HTMLResponse(render_login_page("Sign-in is not available right now."), status_code=503)

    try:
        session = await provider.sign_in_with_password(email, password)
    except AuthProviderError as e:
        return HTMLResponse(render_login_page(e.message), status_code=401)

    if session is None:
        logger.warning(f"Sign-in for '{email}' returned no session (email confirmation pending?).")
        return HTMLResponse(render_login_page("No session was created. Confirm your email and try again."), status_code=401)

    response = RedirectResponse(url=settings.UI_PATH, status_code=303)
    set_session_cookies(response, session)
    return response
