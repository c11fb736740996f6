# eventhub/views/event_views.py
"""
Event management and discovery views.
"""

import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..calendar_utils import generate_google_calendar_link, generate_ics_file
from ..models import Event, User
from ..permissions import IsOrganizerOrAdmin
from ..serializers import EventSerializer, EventWriteSerializer
from ..ticketing import event_statistics, sync_sub_events
from .utils import EventPagination, build_event_discovery_qs, managed_event, paginate

logger = logging.getLogger(__name__)

RELATED_EVENTS_LIMIT = 3


class EventListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        events = build_event_discovery_qs(request)
        return paginate(request, events, EventSerializer, EventPagination)

    def post(self, request):
        # Only organizers and admins can create events
        if request.user.role not in ["organizer", "admin"]:
            return Response(
                {"error": "Only organizers and administrators can create events"},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = EventWriteSerializer(data=request.data)
        if serializer.is_valid():
            parent = serializer.validated_data.get("parent_event")
            if parent is not None and not parent.is_managed_by(request.user):
                return Response(
                    {"error": "You can only add sub-events to your own events"},
                    status=status.HTTP_403_FORBIDDEN,
                )
            event = serializer.save(organizer=request.user)
            logger.info("Event %s created by %s", event.pk, request.user.email)
            return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class EventDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, pk):
        try:
            return Event.objects.select_related("category", "organizer").get(pk=pk)
        except Event.DoesNotExist:
            return None

    def get(self, request, pk):
        event = self.get_object(pk)
        if event is None or (event.status != Event.PUBLISHED and not event.is_managed_by(request.user)):
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(EventSerializer(event).data)

    def put(self, request, pk):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk):
        return self._update(request, pk, partial=True)

    def _update(self, request, pk, partial):
        event = self.get_object(pk)
        if event is None:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        if not event.is_managed_by(request.user):
            return Response({"error": "You can only edit your own events"}, status=status.HTTP_403_FORBIDDEN)
        serializer = EventWriteSerializer(event, data=request.data, partial=partial)
        if serializer.is_valid():
            event = serializer.save()
            return Response(EventSerializer(event).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    def delete(self, request, pk):
        event = self.get_object(pk)
        if event is None:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        if not event.is_managed_by(request.user):
            return Response({"error": "You can only delete your own events"}, status=status.HTTP_403_FORBIDDEN)
        logger.info("Event %s deleted by %s", event.pk, request.user.email)
        event.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class SubEventListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event = get_object_or_404(Event, pk=pk)
        sub_events = event.sub_events.select_related("category", "organizer").order_by("start_at")
        return Response(EventSerializer(sub_events, many=True).data)


class RelatedEventsView(APIView):
    """Published events sharing the category or a tag."""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event = get_object_or_404(Event, pk=pk)
        tag_ids = list(event.tags.values_list("id", flat=True))
        match = Q(tags__in=tag_ids)
        if event.category_id:
            match |= Q(category_id=event.category_id)
        related = (
            Event.objects
            .filter(match, status=Event.PUBLISHED, parent_event__isnull=True)
            .exclude(pk=event.pk)
            .distinct()
            .order_by("start_at")[:RELATED_EVENTS_LIMIT]
        )
        return Response(EventSerializer(related, many=True).data)


class OrganizerEventsView(APIView):
    """Events by one organizer; defaults to the requester."""
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id=None):
        if user_id is None:
            organizer = request.user
        else:
            organizer = get_object_or_404(User, pk=user_id)
        events = Event.objects.filter(organizer=organizer, parent_event__isnull=True)
        if organizer != request.user and not request.user.is_admin():
            events = events.filter(status=Event.PUBLISHED)
        events = events.order_by("-created_at")
        return paginate(request, events, EventSerializer, EventPagination)


class EventStatisticsView(APIView):
    permission_classes = [IsAuthenticated, IsOrganizerOrAdmin]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        return Response(event_statistics(event))


class SyncSubEventsView(APIView):
    permission_classes = [IsAuthenticated, IsOrganizerOrAdmin]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        if event.parent_event_id:
            return Response({"error": "Only main events have sub-events"}, status=status.HTTP_400_BAD_REQUEST)
        updated = sync_sub_events(event)
        return Response({"message": f"Synced {updated} sub-event(s)", "updated": updated})


class EventCalendarView(APIView):
    """Download the event as an .ics file."""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event = get_object_or_404(Event, pk=pk)
        return generate_ics_file(event, request)


class GoogleCalendarLinkView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event = get_object_or_404(Event, pk=pk)
        return Response({"url": generate_google_calendar_link(event, request)})
