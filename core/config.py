# core/config.py
import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import logging

# Load variables from .env file located in the project root directory
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path)
else:
    load_dotenv() # Fallback

class Settings(BaseSettings):
    """Loads configuration settings from environment variables and .env file."""

    # --- Supabase Configuration ---
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None # ANON key

    # --- Storage Configuration ---
    IMAGE_BUCKET: str = "images"
    GALLERY_LIST_LIMIT: int = int(os.getenv("GALLERY_LIST_LIMIT", 100))

    # --- Routing ---
    UI_PATH: str = "/ui"
    LOGIN_ROUTE: str = "/auth"

    # --- Session Cookies ---
    ACCESS_TOKEN_COOKIE: str = "sb-access-token"
    REFRESH_TOKEN_COOKIE: str = "sb-refresh-token"
    COOKIE_SECURE: bool = False

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'
        extra = 'ignore'

# Instantiate settings once for import
settings = Settings()

# --- Logging Setup ---
log_level_str = os.getenv("LOG_LEVEL", "INFO").upper(); log_level = getattr(logging, log_level_str, logging.INFO)
logging.basicConfig(level=log_level, format='%(asctime)s - %(name)s - [%(levelname)s] - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
logger = logging.getLogger("Uploadly_Core")
logging.getLogger("httpx").setLevel(logging.WARNING); logging.getLogger("supabase").setLevel(logging.WARNING)
logging.getLogger("gradio").setLevel(logging.WARNING)

# --- Configuration Validation Checks ---
logger.info(f"Core Settings loaded. Log Level: {log_level_str}")
if not settings.SUPABASE_URL or not settings.SUPABASE_KEY: logger.warning("Supabase URL/Key missing.")
if not settings.IMAGE_BUCKET: logger.warning("IMAGE_BUCKET missing, uploads will fail.")
else: logger.info(f"Using Supabase Storage Bucket: {settings.IMAGE_BUCKET}")
if settings.GALLERY_LIST_LIMIT <= 0:
    logger.error(f"Invalid GALLERY_LIST_LIMIT: {settings.GALLERY_LIST_LIMIT}.")
logger.info(f"Login route: {settings.LOGIN_ROUTE}, UI mounted at: {settings.UI_PATH}")
