import os

from dotenv import load_dotenv

# Loads the .env file from the project root
load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _csv(name: str) -> list[str]:
    raw = os.getenv(name, "")
    return [value.strip() for value in raw.split(",") if value.strip()]


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./lokal.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

# Seed/demo rows are only visible when this is on
ENABLE_MOCK_DATA = _flag("ENABLE_MOCK_DATA", os.getenv("VITE_ENABLE_MOCK_DATA", ""))

# Emails that are bootstrapped as admins on first profile fetch
SUPER_ADMIN_EMAILS = {email.lower() for email in _csv("SUPER_ADMIN_EMAILS")}

# Hosted auth provider (access tokens are HS256 JWTs signed with the project secret)
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET", os.getenv("SUPABASE_JWT_SECRET", ""))
AUTH_JWT_ALGORITHM = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated").strip() or None

# Gemini
API_KEY_ENV_PRECEDENCE = ("VITE_API_KEY", "API_KEY", "GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_SEARCH_MODEL = os.getenv("GEMINI_SEARCH_MODEL", "gemini-2.5-pro")
GEMINI_MAPS_MODEL = os.getenv("GEMINI_MAPS_MODEL", "gemini-2.5-flash")

# Client-local state (prompt history, preferences)
LOKAL_STATE_PATH = os.getenv("LOKAL_STATE_PATH", "./lokal_state.json")

OUTREACH_SENDER_EMAIL = os.getenv("OUTREACH_SENDER_EMAIL", "")
OUTREACH_SENDER_PHONE = os.getenv("OUTREACH_SENDER_PHONE", "")

# CORS
CORS_ORIGINS = [origin for origin in _csv("CORS_ORIGINS") if origin != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
