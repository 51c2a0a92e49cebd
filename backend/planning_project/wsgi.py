"""WSGI config for the Account Planning backend."""

import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "planning_project.settings.production")

application = get_wsgi_application()
