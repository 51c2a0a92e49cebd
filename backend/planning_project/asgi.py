"""ASGI config for the Account Planning backend."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "planning_project.settings.production")

application = get_asgi_application()
