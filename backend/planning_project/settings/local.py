"""Local development settings."""

from .base import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS += ["127.0.0.1", "localhost"]  # noqa: F405

# The frontend dev server runs on its own port.
CORS_ALLOW_ALL_ORIGINS = True

# Local Supabase stack from `supabase start` unless SUPABASE_URL is set.
if not SUPABASE_ANON_KEY:  # noqa: F405
    SUPABASE_ANON_KEY = "local-anon-key"

for logger_name in ("apps.accounts", "apps.ai", "apps.assistant"):
    LOGGING["loggers"][logger_name]["level"] = "DEBUG"  # noqa: F405
