from supabase import create_client, Client
from supabase.client import ClientOptions
from core.config import settings, logger
import asyncio
from functools import partial

def session_client_options() -> ClientOptions:
    """
    Options for per-visitor clients.

    No background refresh timer and no session storage: a server-side refresh
    would rotate the refresh token without updating the visitor's cookies.
    """
    return ClientOptions(auto_refresh_token=False, persist_session=False)

async def create_supabase_client() -> Client:
    """
    Creates a fresh Supabase client using the anon key.

    Auth state lives on the client instance, so every browser session and every
    login attempt gets its own client instead of sharing a cached one.
    """
    url = settings.SUPABASE_URL
    key = settings.SUPABASE_KEY

    if not url or not key:
        logger.error("Supabase URL or Anon Key not configured. Cannot create client.")
        raise ValueError("Supabase URL or Anon Key not configured")

    logger.debug("Initializing Supabase client with anon key...")
    try:
        # Run create_client in a thread pool since it's synchronous
        loop = asyncio.get_running_loop()
        client_instance = await loop.run_in_executor(
            None,
            partial(create_client, url, key, options=session_client_options())
        )
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}", exc_info=True)
        raise RuntimeError(f"Failed to initialize Supabase client: {e}")

    logger.debug("Supabase client initialized successfully.")
    return client_instance
