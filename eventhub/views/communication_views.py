# eventhub/views/communication_views.py
"""
Bulk emails to an event's stakeholders.
"""

import logging

from django.conf import settings

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..models import Certificate, Gallery
from ..tasks import send_certificate_email, send_thank_you_email
from .utils import managed_event

logger = logging.getLogger(__name__)

EMAIL_TYPES = ("certificate", "thank_you")


def gallery_share_url(gallery):
    return f"{settings.APP_BASE_URL}/gallery/{gallery.shareable_link}"


class StakeholderEmailView(APIView):
    """
    ``email_type``: ``certificate`` attaches each stakeholder's PDF;
    ``thank_you`` may link a gallery (``gallery_id``).
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error

        email_type = request.data.get("email_type")
        if email_type not in EMAIL_TYPES:
            return Response(
                {"error": f"email_type must be one of: {', '.join(EMAIL_TYPES)}"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        stakeholders = event.stakeholders.select_related("event").order_by("name")
        ids = request.data.get("stakeholder_ids")
        if ids:
            stakeholders = stakeholders.filter(pk__in=ids)
        if not stakeholders.exists():
            return Response({"error": "No stakeholders selected"}, status=status.HTTP_400_BAD_REQUEST)

        gallery_url = None
        gallery_id = request.data.get("gallery_id")
        if email_type == "thank_you" and gallery_id:
            gallery = Gallery.objects.filter(pk=gallery_id, event=event).first()
            if gallery is None:
                return Response({"error": "Gallery not found"}, status=status.HTTP_404_NOT_FOUND)
            gallery_url = gallery_share_url(gallery)

        sent = failed = skipped = 0
        for stakeholder in stakeholders:
            if email_type == "certificate":
                certificate = (
                    Certificate.objects
                    .select_related("stakeholder", "event", "template")
                    .filter(stakeholder=stakeholder)
                    .first()
                )
                if certificate is None:
                    skipped += 1
                    continue
                ok = send_certificate_email(certificate)
            else:
                ok = send_thank_you_email(stakeholder, gallery_url=gallery_url)
            if ok:
                sent += 1
            else:
                failed += 1

        logger.info("%s emails for event %s: %s sent, %s failed", email_type, event.pk, sent, failed)
        return Response({
            "message": f"Sent {sent} email(s)",
            "sent": sent,
            "failed": failed,
            "skipped": skipped,
        })
