# eventhub/views/issue_views.py
"""
Attendee issue reports and their handling by organizers.
"""

from django.db import transaction
from django.utils import timezone

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..analytics import issue_analytics
from ..models import Issue
from ..serializers import IssueSerializer, IssueStatusSerializer
from ..tasks import send_issue_notification
from .utils import StandardPagination, managed_event, paginate


class IssueReportView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = IssueSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        event = serializer.validated_data["event"]
        user = request.user
        issue = serializer.save(
            event_title=event.title,
            reported_by=user,
            reporter_name=user.get_full_name() or user.email,
            reporter_email=user.email,
            organizer=event.organizer,
            organizer_email=event.organizer.email,
        )
        transaction.on_commit(lambda: send_issue_notification.delay(issue.id))
        return Response(
            {"message": "Issue reported successfully", "issue": IssueSerializer(issue).data},
            status=status.HTTP_201_CREATED,
        )


class MyIssuesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        issues = Issue.objects.filter(reported_by=request.user).order_by("-created_at")
        return paginate(request, issues, IssueSerializer, StandardPagination)


class EventIssuesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        issues = event.issues.order_by("-created_at")
        for field in ("status", "severity", "category"):
            value = request.query_params.get(field)
            if value:
                issues = issues.filter(**{field: value})
        return paginate(request, issues, IssueSerializer, StandardPagination)


class IssueStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        try:
            issue = Issue.objects.select_related("event").get(pk=pk)
        except Issue.DoesNotExist:
            return Response({"error": "Issue not found"}, status=status.HTTP_404_NOT_FOUND)
        if not issue.event.is_managed_by(request.user):
            return Response({"error": "You are not the organizer of this event"}, status=status.HTTP_403_FORBIDDEN)
        if not request.data.get("status"):
            return Response({"error": "Status is required"}, status=status.HTTP_400_BAD_REQUEST)

        serializer = IssueStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        issue.status = serializer.validated_data["status"]
        if "admin_notes" in serializer.validated_data:
            issue.admin_notes = serializer.validated_data["admin_notes"]
        if issue.status in (Issue.RESOLVED, Issue.CLOSED):
            issue.resolved_at = issue.resolved_at or timezone.now()
        else:
            issue.resolved_at = None
        issue.save()
        return Response(IssueSerializer(issue).data)

    put = patch


class IssueAnalyticsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        return Response(issue_analytics(event.issues.all()))
