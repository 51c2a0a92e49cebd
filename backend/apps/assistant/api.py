"""REST API endpoints for the documentation assistant."""

from __future__ import annotations

import logging

from django.urls import path
from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.ai.services import AIError, PaymentRequiredError, RateLimitedError
from apps.assistant import models, prompts, serializers
from apps.assistant.services import AssistantBlocked, OutOfContextGuard, answer_question
from apps.core.posthog import capture_exception

logger = logging.getLogger(__name__)

app_name = "assistant"


class AssistantQueryView(APIView):
    """Answer a question about the application, subject to the out-of-scope limit."""

    def post(self, request, *args, **kwargs):
        serializer = serializers.AssistantQuerySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            reply = answer_question(
                request.user.id,
                data["question"],
                clicked_element=data.get("clicked_element") or None,
                current_route=data.get("current_route") or None,
            )
        except AssistantBlocked as exc:
            return Response(
                {
                    "answer": prompts.BLOCKED_MESSAGE,
                    "blocked": True,
                    "blocked_until": exc.blocked_until,
                    "query_type": models.QueryType.OUT_OF_CONTEXT,
                }
            )
        except RateLimitedError as exc:
            return Response({"detail": exc.message}, status=status.HTTP_429_TOO_MANY_REQUESTS)
        except PaymentRequiredError as exc:
            return Response({"detail": exc.message}, status=status.HTTP_402_PAYMENT_REQUIRED)
        except AIError as exc:
            logger.error("Assistant provider call failed: %s", exc.message)
            capture_exception(exc, distinct_id=str(request.user.id))
            return Response({"detail": exc.message}, status=status.HTTP_502_BAD_GATEWAY)

        return Response(reply.as_dict())


class AssistantLimitStatusView(APIView):
    def get(self, request, *args, **kwargs):
        decision = OutOfContextGuard().check(request.user.id)
        return Response(
            {
                "state": decision.state.value,
                "count": decision.count,
                "remaining": decision.remaining,
                "blocked": decision.blocked,
                "blocked_until": decision.blocked_until,
            }
        )


class FeedbackScoreView(APIView):
    def post(self, request, pk: str) -> Response:
        serializer = serializers.FeedbackScoreSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        feedback = models.AssistantFeedback.objects.filter(pk=pk, user_id=request.user.id).first()
        if feedback is None:
            return Response({"detail": "Not found"}, status=status.HTTP_404_NOT_FOUND)

        feedback.feedback_score = serializer.validated_data["score"]
        feedback.save(update_fields=["feedback_score"])
        return Response(serializers.AssistantFeedbackSerializer(feedback).data)


class FeedbackResolveView(APIView):
    def post(self, request, pk: str) -> Response:
        if not getattr(request.user, "is_staff", False):
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        feedback = models.AssistantFeedback.objects.filter(pk=pk).first()
        if feedback is None:
            return Response({"detail": "Not found"}, status=status.HTTP_404_NOT_FOUND)

        feedback.resolved = True
        feedback.resolved_at = timezone.now()
        feedback.save(update_fields=["resolved", "resolved_at"])
        return Response(serializers.AssistantFeedbackSerializer(feedback).data)


urlpatterns = [
    path("query/", AssistantQueryView.as_view(), name="query"),
    path("limits/", AssistantLimitStatusView.as_view(), name="limits"),
    path("feedback/<uuid:pk>/score/", FeedbackScoreView.as_view(), name="feedback-score"),
    path("feedback/<uuid:pk>/resolve/", FeedbackResolveView.as_view(), name="feedback-resolve"),
]
