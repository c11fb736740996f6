# eventhub/views/stakeholder_views.py
"""
Stakeholder management: CRUD, attendance, import/export and stats.
"""

import logging

from django.db import transaction
from django.db.models import Q

from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..analytics import stakeholder_stats
from ..exports import STAKEHOLDER_HEADERS, csv_response, stakeholder_rows
from ..models import Order, Stakeholder, StakeholderImport
from ..serializers import BulkAttendanceSerializer, StakeholderImportSerializer, StakeholderSerializer
from ..tasks import import_stakeholders
from .utils import StandardPagination, managed_event, paginate

logger = logging.getLogger(__name__)

IMPORT_EXTENSIONS = (".csv", ".xlsx", ".xlsm")


class StakeholderListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error

        stakeholders = event.stakeholders.select_related("certificate").order_by("name")
        params = request.query_params
        if params.get("role"):
            stakeholders = stakeholders.filter(role=params["role"])
        if params.get("attendance_status"):
            stakeholders = stakeholders.filter(attendance_status=params["attendance_status"])
        search = params.get("search")
        if search:
            stakeholders = stakeholders.filter(
                Q(name__icontains=search)
                | Q(email__icontains=search)
                | Q(additional_info__company__icontains=search)
            )
        return paginate(request, stakeholders, StakeholderSerializer, StandardPagination)

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = StakeholderSerializer(data=request.data, context={"event": event})
        if serializer.is_valid():
            stakeholder = serializer.save(event=event)
            return Response(StakeholderSerializer(stakeholder).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class StakeholderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, pk):
        try:
            return Stakeholder.objects.select_related("event").get(pk=pk)
        except Stakeholder.DoesNotExist:
            return None

    def _load(self, request, pk):
        stakeholder = self.get_object(pk)
        if stakeholder is None:
            return None, Response({"error": "Stakeholder not found"}, status=status.HTTP_404_NOT_FOUND)
        if not stakeholder.event.is_managed_by(request.user):
            return None, Response({"error": "You are not the organizer of this event"}, status=status.HTTP_403_FORBIDDEN)
        return stakeholder, None

    def get(self, request, pk):
        stakeholder, error = self._load(request, pk)
        if error:
            return error
        return Response(StakeholderSerializer(stakeholder).data)

    def patch(self, request, pk):
        stakeholder, error = self._load(request, pk)
        if error:
            return error
        serializer = StakeholderSerializer(stakeholder, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    put = patch

    def delete(self, request, pk):
        stakeholder, error = self._load(request, pk)
        if error:
            return error
        stakeholder.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class BulkAttendanceView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = BulkAttendanceSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        modified = event.stakeholders.filter(
            pk__in=serializer.validated_data["stakeholder_ids"]
        ).update(attendance_status=serializer.validated_data["attendance_status"])
        return Response({"message": f"Updated {modified} stakeholder(s)", "modifiedCount": modified})


class StakeholderStatsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        return Response(stakeholder_stats(event))


class StakeholderImportView(APIView):
    """Upload a CSV/Excel sheet; rows are processed by a background task."""
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        imports = event.stakeholder_imports.order_by("-created_at")
        return Response(StakeholderImportSerializer(imports, many=True).data)

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        upload = request.FILES.get("file")
        if upload is None:
            return Response({"error": "No file uploaded"}, status=status.HTTP_400_BAD_REQUEST)
        if not upload.name.lower().endswith(IMPORT_EXTENSIONS):
            return Response({"error": "Upload a .csv or .xlsx file"}, status=status.HTTP_400_BAD_REQUEST)

        record = StakeholderImport.objects.create(
            event=event,
            file=upload,
            file_name=upload.name,
            imported_by=request.user,
        )
        transaction.on_commit(lambda: import_stakeholders.delay(record.id))
        return Response(StakeholderImportSerializer(record).data, status=status.HTTP_202_ACCEPTED)


class StakeholderImportDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        try:
            record = StakeholderImport.objects.select_related("event").get(pk=pk)
        except StakeholderImport.DoesNotExist:
            return Response({"error": "Import not found"}, status=status.HTTP_404_NOT_FOUND)
        if not record.event.is_managed_by(request.user):
            return Response({"error": "You are not the organizer of this event"}, status=status.HTTP_403_FORBIDDEN)
        return Response(StakeholderImportSerializer(record).data)


class SyncStakeholdersFromOrdersView(APIView):
    """Add every buyer of the event as an attendee stakeholder."""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error

        existing = set(event.stakeholders.values_list("email", flat=True))
        created = 0
        orders = Order.objects.filter(event=event, status=Order.COMPLETED).select_related("buyer")
        for order in orders:
            buyer = order.buyer
            email = buyer.email.lower()
            if email in existing:
                continue
            Stakeholder.objects.create(
                event=event,
                name=buyer.get_full_name() or buyer.email,
                email=email,
                user=buyer,
                role=Stakeholder.ROLE_ATTENDEE,
                attendance_status=Stakeholder.REGISTERED,
            )
            existing.add(email)
            created += 1

        logger.info("Synced %s stakeholder(s) from orders for event %s", created, event.pk)
        return Response({"message": f"Added {created} stakeholder(s) from orders", "created": created})


class StakeholderExportView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        return csv_response(f"stakeholders_event_{event.id}.csv", STAKEHOLDER_HEADERS, stakeholder_rows(event))
