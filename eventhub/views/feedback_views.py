# eventhub/views/feedback_views.py
"""
Post-event feedback: templates, submissions, analytics and the email run.
"""

import logging

from django.conf import settings
from django.utils import timezone
from django.utils.crypto import constant_time_compare

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..analytics import feedback_analytics
from ..models import FeedbackResponse, FeedbackTemplate
from ..serializers import FeedbackResponseSerializer, FeedbackTemplateSerializer
from ..tasks import event_recipients, process_pending_feedback_emails, send_feedback_emails
from .utils import LargePagination, client_ip, get_event_or_none, managed_event, paginate

logger = logging.getLogger(__name__)


class FeedbackTemplateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event = get_event_or_none(pk)
        if event is None:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        template = FeedbackTemplate.objects.filter(event=event).first()
        if template is None:
            # unsaved default
            template = FeedbackTemplate(event=event)
        return Response(FeedbackTemplateSerializer(template).data)

    def put(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        template = FeedbackTemplate.objects.filter(event=event).first()
        serializer = FeedbackTemplateSerializer(template, data=request.data, partial=template is not None)
        if serializer.is_valid():
            created = template is None
            template = serializer.save(event=event)
            return Response(
                FeedbackTemplateSerializer(template).data,
                status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
            )
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    post = put


class FeedbackSubmitView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event = get_event_or_none(pk)
        if event is None:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        if not event.feedback_enabled:
            return Response({"error": "Feedback is not enabled for this event"}, status=status.HTTP_400_BAD_REQUEST)

        serializer = FeedbackResponseSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        anonymous = serializer.validated_data.get("is_anonymous", False)
        if not anonymous and FeedbackResponse.objects.filter(event=event, user=request.user).exists():
            return Response(
                {"error": "You have already submitted feedback for this event"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        response = serializer.save(
            event=event,
            user=None if anonymous else request.user,
            ip_address=client_ip(request),
        )
        return Response(
            {"message": "Thank you for your feedback", "feedback": FeedbackResponseSerializer(response).data},
            status=status.HTTP_201_CREATED,
        )


class FeedbackResponsesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        responses = event.feedback_responses.select_related("user").order_by("-submitted_at")
        return paginate(request, responses, FeedbackResponseSerializer, LargePagination)


class FeedbackAnalyticsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        return Response(feedback_analytics(event))


class SendFeedbackEmailsView(APIView):
    """Send the feedback request to every buyer right away."""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        if not event.feedback_enabled:
            return Response({"error": "Feedback is not enabled for this event"}, status=status.HTTP_400_BAD_REQUEST)
        if not event_recipients(event):
            return Response({"error": "No attendees found for this event"}, status=status.HTTP_400_BAD_REQUEST)

        result = send_feedback_emails(event.id)
        return Response({"message": f"Sent {result['successfulEmails']} feedback email(s)", **result})


class FeedbackCronView(APIView):
    """
    Entry point for an external scheduler.

    Requires ``Authorization: Bearer <CRON_SECRET>``; disabled when no secret
    is configured.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def _authorized(self, request):
        secret = getattr(settings, "CRON_SECRET", "")
        header = request.headers.get("Authorization", "")
        return bool(secret) and constant_time_compare(header, f"Bearer {secret}")

    def get(self, request):
        if not self._authorized(request):
            return Response({"error": "Unauthorized"}, status=status.HTTP_401_UNAUTHORIZED)
        result = process_pending_feedback_emails()
        logger.info("Feedback cron processed %s event(s)", result["processedEvents"])
        return Response({"timestamp": timezone.now().isoformat(), **result})

    post = get
