# eventhub/views/update_views.py
"""
Organizer announcements to event attendees.
"""

from django.db import transaction

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..analytics import update_stats
from ..models import EventUpdate
from ..serializers import EventUpdateSerializer
from ..tasks import deliver_event_update
from .utils import StandardPagination, get_event_or_none, managed_event, paginate

VISIBLE_STATUSES = (EventUpdate.PUBLISHED, EventUpdate.SENT)


class EventUpdateListView(APIView):
    """
    Organizers see every update of their event; everyone else only sees the
    published ones.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event = get_event_or_none(pk)
        if event is None:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        updates = event.updates.select_related("created_by").order_by("-created_at")
        if not event.is_managed_by(request.user):
            updates = updates.filter(status__in=VISIBLE_STATUSES).order_by("-published_at")
        else:
            status_param = request.query_params.get("status")
            if status_param:
                updates = updates.filter(status=status_param)
        return paginate(request, updates, EventUpdateSerializer, StandardPagination)

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = EventUpdateSerializer(data=request.data)
        if serializer.is_valid():
            update = serializer.save(event=event, created_by=request.user)
            return Response(EventUpdateSerializer(update).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class EventUpdateDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, pk):
        try:
            return EventUpdate.objects.select_related("event", "created_by").get(pk=pk)
        except EventUpdate.DoesNotExist:
            return None

    def get(self, request, pk):
        update = self.get_object(pk)
        if update is None:
            return Response({"error": "Update not found"}, status=status.HTTP_404_NOT_FOUND)
        if update.status not in VISIBLE_STATUSES and not update.event.is_managed_by(request.user):
            return Response({"error": "Update not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(EventUpdateSerializer(update).data)

    def patch(self, request, pk):
        update = self.get_object(pk)
        if update is None:
            return Response({"error": "Update not found"}, status=status.HTTP_404_NOT_FOUND)
        if not update.event.is_managed_by(request.user):
            return Response({"error": "Only the event organizer can edit updates"}, status=status.HTTP_403_FORBIDDEN)
        serializer = EventUpdateSerializer(update, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    put = patch

    def delete(self, request, pk):
        update = self.get_object(pk)
        if update is None:
            return Response({"error": "Update not found"}, status=status.HTTP_404_NOT_FOUND)
        if not update.event.is_managed_by(request.user):
            return Response({"error": "Only the event organizer can delete updates"}, status=status.HTTP_403_FORBIDDEN)
        update.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class PublishEventUpdateView(APIView):
    """Publish now, or schedule when ``scheduled_for`` is in the future."""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        try:
            update = EventUpdate.objects.select_related("event").get(pk=pk)
        except EventUpdate.DoesNotExist:
            return Response({"error": "Update not found"}, status=status.HTTP_404_NOT_FOUND)
        if not update.event.is_managed_by(request.user):
            return Response({"error": "Only the event organizer can publish updates"}, status=status.HTTP_403_FORBIDDEN)
        if update.status in VISIBLE_STATUSES:
            return Response({"error": "Update is already published"}, status=status.HTTP_400_BAD_REQUEST)

        update.publish()
        if update.status == EventUpdate.PUBLISHED:
            transaction.on_commit(lambda: deliver_event_update.delay(update.id))
            message = "Update published"
        else:
            message = "Update scheduled"
        return Response({"message": message, "update": EventUpdateSerializer(update).data})


class EventUpdateStatsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        return Response(update_stats(event))
