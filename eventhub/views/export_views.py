# eventhub/views/export_views.py
"""
Attendee exports (CSV and Excel) for event organizers.
"""

from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from ..exports import ATTENDEE_HEADERS, attendee_rows, csv_response, xlsx_response
from .utils import managed_event


class EventAttendeesCSVView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        rows = attendee_rows(event, request.query_params.get("status"))
        return csv_response(f"attendees_event_{event.id}.csv", ATTENDEE_HEADERS, rows)


class EventAttendeesExcelView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        rows = attendee_rows(event, request.query_params.get("status"))
        return xlsx_response(f"attendees_event_{event.id}.xlsx", ATTENDEE_HEADERS, rows, title="Attendees")
