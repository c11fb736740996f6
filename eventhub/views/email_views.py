# eventhub/views/email_views.py
from datetime import timedelta

from django.core.signing import BadSignature
from django.db import transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404, render
from django.utils import timezone

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..email_tokens import read_email_token
from ..emails import make_send_key
from ..models import EmailLog, Ticket
from ..tasks import send_order_confirmation_email

RESEND_LIMIT = 3
RESEND_WINDOW = timedelta(days=1)
CONFIRMATION_TEMPLATE = "eventhub/email/ticket_confirmation"


class ResendConfirmationView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        try:
            ticket = Ticket.objects.select_related("event").get(pk=pk)
        except Ticket.DoesNotExist:
            return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
        if ticket.user_id != request.user.id:
            return Response({"error": "Not your ticket"}, status=status.HTTP_403_FORBIDDEN)
        if ticket.status != Ticket.ACTIVE:
            return Response({"error": "Only active tickets can be resent"}, status=status.HTTP_400_BAD_REQUEST)

        send_key = make_send_key(request.user.email, ticket.ticket_id, CONFIRMATION_TEMPLATE)
        since = timezone.now() - RESEND_WINDOW
        # only resends count; the checkout confirmation is logged without a key
        recent = EmailLog.objects.filter(send_key=send_key, created_at__gte=since).count()
        if recent >= RESEND_LIMIT:
            return Response({"ok": False, "error": "Rate limit: 3 per 24h"}, status=status.HTTP_429_TOO_MANY_REQUESTS)

        log = EmailLog.objects.create(
            to=request.user.email,
            subject=f"Your tickets for {ticket.event.title}",
            template=CONFIRMATION_TEMPLATE,
            context_json={"order_id": ticket.order_id, "ticket_id": ticket.ticket_id},
            status="queued",
            user=request.user,
            event_id=str(ticket.event_id),
            ticket_id=str(ticket.id),
            send_key=send_key,
        )
        transaction.on_commit(lambda: send_order_confirmation_email.delay(ticket.order_id, log.id))
        return Response({"ok": True})


def view_ticket_signed(request):
    """Ticket page reached from the signed link in the confirmation email."""
    token = request.GET.get("token", "")
    try:
        payload = read_email_token(token)
    except BadSignature:
        return HttpResponse("Link expired or invalid.", status=400)
    ticket_code, _, to_email = payload.partition(":")
    ticket = get_object_or_404(Ticket.objects.select_related("event", "user"), ticket_id=ticket_code)
    if to_email and to_email.lower() != ticket.user.email.lower():
        return HttpResponse("Token/email mismatch.", status=403)
    return render(request, "eventhub/ticket_view.html", {"ticket": ticket, "event": ticket.event})
