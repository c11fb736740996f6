# eventhub/views/order_views.py
"""
Checkout, order listings and order cancellation.
"""

from django.db.models import Q

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..models import Order
from ..serializers import OrderCreateSerializer, OrderSerializer, TicketSerializer
from ..ticketing import TicketingError, cancel_order_tickets, is_registered, place_order
from .utils import OrderPagination, StandardPagination, get_event_or_none, managed_event, paginate


class OrderCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            order, tickets = place_order(
                user=request.user,
                event=data["event"],
                quantity=data["quantity"],
                sub_event=data.get("sub_event"),
                payment_reference=data.get("payment_reference", ""),
            )
        except TicketingError as exc:
            return Response({"error": exc.message}, status=exc.status_code)

        return Response(
            {
                "message": f"Successfully booked {len(tickets)} ticket(s)",
                "order": OrderSerializer(order).data,
                "tickets": TicketSerializer(tickets, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )


class MyOrdersView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        orders = (
            Order.objects
            .filter(buyer=request.user)
            .select_related("event", "sub_event", "buyer")
            .prefetch_related("tickets")
            .order_by("-created_at")
        )
        return paginate(request, orders, OrderSerializer, OrderPagination)


class EventOrdersView(APIView):
    """Orders of an event for its organizer; ``?search=`` matches the buyer."""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        orders = (
            Order.objects
            .filter(event=event)
            .select_related("event", "sub_event", "buyer")
            .prefetch_related("tickets")
            .order_by("-created_at")
        )
        search = request.query_params.get("search")
        if search:
            orders = orders.filter(
                Q(buyer__email__icontains=search)
                | Q(buyer__first_name__icontains=search)
                | Q(buyer__last_name__icontains=search)
            )
        return paginate(request, orders, OrderSerializer, StandardPagination)


class RegistrationCheckView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event = get_event_or_none(pk)
        if event is None:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        target = event.capacity_event
        return Response({"event_id": event.id, "is_registered": is_registered(request.user, target)})


class CancelOrderTicketsView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        try:
            result = cancel_order_tickets(pk, request.user)
        except TicketingError as exc:
            return Response({"error": exc.message}, status=exc.status_code)
        return Response(result)
