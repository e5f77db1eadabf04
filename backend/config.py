import os
import secrets

APP_TITLE = os.getenv("APP_TITLE", "Smart Bookmarks")
SECRET_KEY = os.getenv("SECRET_KEY", secrets.token_hex(32))
BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")
HTTPS_ONLY = os.getenv("HTTPS_ONLY", "").strip().lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DB_URL = os.getenv("DATABASE_URL") or os.getenv("DB_URL") or "sqlite:///./app.db"
IS_SQLITE = DB_URL.startswith("sqlite:")

# Google OAuth
GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.environ.get("GOOGLE_CLIENT_SECRET", "")
GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"
OAUTH_REDIRECT_URI = os.getenv("OAUTH_REDIRECT_URI", "")
