# eventhub/views/report_views.py
"""
Post-event reports: organizer inputs plus a generated write-up exported as
JSON, PDF or a Word document.
"""

from django.http import HttpResponse
from django.utils.text import slugify

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..models import Report
from ..reports import build_report, render_report_pdf, render_report_word
from ..serializers import ReportSerializer
from .utils import managed_event

REPORT_FORMATS = ("json", "pdf", "word")


def _load_report(request, pk):
    try:
        report = Report.objects.select_related("event", "event__organizer", "event__category").get(pk=pk)
    except Report.DoesNotExist:
        return None, Response({"error": "Report not found"}, status=status.HTTP_404_NOT_FOUND)
    if not report.event.is_managed_by(request.user):
        return None, Response({"error": "You are not the organizer of this event"}, status=status.HTTP_403_FORBIDDEN)
    return report, None


class EventReportListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        return Response(ReportSerializer(event.reports.order_by("-created_at"), many=True).data)

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = ReportSerializer(data=request.data)
        if serializer.is_valid():
            report = serializer.save(event=event, organizer=request.user)
            return Response(ReportSerializer(report).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class ReportDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        report, error = _load_report(request, pk)
        if error:
            return error
        return Response(ReportSerializer(report).data)

    def patch(self, request, pk):
        report, error = _load_report(request, pk)
        if error:
            return error
        serializer = ReportSerializer(report, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    put = patch

    def delete(self, request, pk):
        report, error = _load_report(request, pk)
        if error:
            return error
        report.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class GenerateReportView(APIView):
    """
    Body ``format`` (or ``?output=``): ``json`` (default), ``pdf`` or ``word``.

    ``?format=`` is taken by DRF content negotiation.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        report, error = _load_report(request, pk)
        if error:
            return error
        fmt = (request.data.get("format") or request.query_params.get("output") or "json").lower()
        if fmt not in REPORT_FORMATS:
            return Response(
                {"error": f"Unsupported format. Use one of: {', '.join(REPORT_FORMATS)}"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        content, metrics = build_report(report)
        name = f"event_report_{slugify(report.event.title) or report.event_id}"
        if fmt == "pdf":
            response = HttpResponse(render_report_pdf(content, report), content_type="application/pdf")
            response["Content-Disposition"] = f'attachment; filename="{name}.pdf"'
            return response
        if fmt == "word":
            response = HttpResponse(render_report_word(content, report, metrics), content_type="application/msword")
            response["Content-Disposition"] = f'attachment; filename="{name}.doc"'
            return response
        return Response({"report": content, "metrics": metrics})
