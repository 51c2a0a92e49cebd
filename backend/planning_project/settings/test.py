"""Settings used by the pytest suite."""

from .base import *  # noqa: F401,F403

DEBUG = False
SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

SUPABASE_URL = "https://auth.test"
SUPABASE_ANON_KEY = "anon-test-key"
LOVABLE_API_KEY = "lovable-test-key"
OPENAI_API_KEY = None
OPENROUTER_API_KEY = None

ASSISTANT_AI_PROVIDER = "lovable"
ASSISTANT_AI_MODEL = "google/gemini-3-flash-preview"
ASSISTANT_LIMITS = {
    "max_out_of_context": 3,
    "window_hours": 24,
    "block_hours": 24,
    "fail_open": True,
}

POSTHOG_PROJECT_API_KEY = None
POSTHOG_DISABLED = True
