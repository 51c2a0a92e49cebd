"""URL configuration for the Account Planning backend."""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/ai/", include("apps.ai.api", namespace="ai")),
    path("api/assistant/", include("apps.assistant.api", namespace="assistant")),
]
