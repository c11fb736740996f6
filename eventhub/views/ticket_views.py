# eventhub/views/ticket_views.py
"""
Ticket listings and door verification (entry code / QR scan).
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..models import Ticket
from ..serializers import EntryCodeSerializer, QRScanSerializer, TicketSerializer
from ..ticketing import extract_entry_code, generate_tickets_for_event, verify_entry_code
from .utils import StandardPagination, decode_qr_from_uploaded, managed_event, paginate

logger = logging.getLogger(__name__)


def _verification_response(success, message, ticket, **extra):
    body = {
        "success": success,
        "message": message,
        "ticket": TicketSerializer(ticket).data if ticket else None,
        **extra,
    }
    if not success:
        body["error"] = message
    return Response(body, status=status.HTTP_200_OK if success else status.HTTP_400_BAD_REQUEST)


class MyTicketsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        tickets = (
            Ticket.objects
            .filter(user=request.user)
            .select_related("event", "user")
            .order_by("-issued_at")
        )
        status_param = request.query_params.get("status")
        if status_param:
            tickets = tickets.filter(status=status_param)
        return Response(TicketSerializer(tickets, many=True).data)


class TicketDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, pk):
        try:
            return Ticket.objects.select_related("event", "user").get(pk=pk)
        except Ticket.DoesNotExist:
            return None

    def get(self, request, pk):
        ticket = self.get_object(pk)
        if ticket is None:
            return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
        if not (ticket.user_id == request.user.id or ticket.event.is_managed_by(request.user)):
            return Response({"error": "You do not have permission to view this ticket"}, status=status.HTTP_403_FORBIDDEN)
        return Response(TicketSerializer(ticket).data)


class EventTicketsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        tickets = event.tickets.select_related("event", "user").order_by("-issued_at")
        status_param = request.query_params.get("status")
        if status_param:
            tickets = tickets.filter(status=status_param)
        return paginate(request, tickets, TicketSerializer, StandardPagination)


class VerifyEntryCodeView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = EntryCodeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        # tickets live on the main event
        event = event.capacity_event

        success, message, ticket = verify_entry_code(
            event, serializer.validated_data["entry_code"], verified_by=request.user
        )
        return _verification_response(success, message, ticket, method="entry_code")


class QRScanView(APIView):
    """
    Verify a ticket from a scanned QR code.

    Accepts either the decoded text (``qr_data``) or a photo of the code
    (``qr_image``), which is decoded with OpenCV.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = QRScanSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        event = event.capacity_event

        payload = serializer.validated_data.get("qr_data")
        image = serializer.validated_data.get("qr_image")
        if not payload and image is not None:
            payload = decode_qr_from_uploaded(image)
            if not payload:
                return Response({"error": "No QR code found in the image"}, status=status.HTTP_400_BAD_REQUEST)

        code = extract_entry_code(event, payload)
        if not code:
            return Response({"error": "No entry code found in QR data"}, status=status.HTTP_400_BAD_REQUEST)

        success, message, ticket = verify_entry_code(event, code, verified_by=request.user)
        return _verification_response(success, message, ticket, method="qr_scan", entry_code=code)


class GenerateTicketsView(APIView):
    """Issue any tickets missing from the event's completed orders."""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        created = generate_tickets_for_event(event)
        return Response(
            {
                "message": f"Generated {len(created)} ticket(s)",
                "generated": len(created),
                "tickets": TicketSerializer(created, many=True).data,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
