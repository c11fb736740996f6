# eventhub/views/utils.py
"""
Shared utilities and helper functions for views.
"""

from datetime import datetime

import numpy as np
import cv2

from django.db.models import Q
from django.utils import timezone

from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from ..models import Event


class EventPagination(PageNumberPagination):
    """Event listings: six cards per page."""
    page_size = 6
    page_size_query_param = "page_size"
    max_page_size = 100


class StandardPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 100


class OrderPagination(PageNumberPagination):
    page_size = 3
    page_size_query_param = "page_size"
    max_page_size = 50


class LargePagination(PageNumberPagination):
    """Photos and feedback responses."""
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


def paginate(request, queryset, serializer_class, pagination_class=StandardPagination, **serializer_kwargs):
    paginator = pagination_class()
    page = paginator.paginate_queryset(queryset, request)
    serializer = serializer_class(page, many=True, **serializer_kwargs)
    return paginator.get_paginated_response(serializer.data)


def parse_date(value):
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


def build_event_discovery_qs(request):
    """Published main events, filtered by search/category/date/organizer params."""
    qs = (
        Event.objects
        .filter(status=Event.PUBLISHED, parent_event__isnull=True)
        .select_related("category", "organizer")
        .prefetch_related("tags")
        .order_by("-created_at")
    )

    get_param = getattr(request, "query_params", request.GET)
    category = get_param.get("category")
    search = get_param.get("search") or get_param.get("query")
    date_from = get_param.get("date_from")
    date_to = get_param.get("date_to")
    upcoming = get_param.get("upcoming")

    if category:
        qs = qs.filter(category__name__iexact=category)
    if search:
        qs = qs.filter(
            Q(title__icontains=search)
            | Q(description__icontains=search)
            | Q(location__icontains=search)
            | Q(landmark__icontains=search)
        )
    if date_from and (df := parse_date(date_from)):
        qs = qs.filter(start_at__gte=df)
    if date_to and (dtv := parse_date(date_to)):
        qs = qs.filter(start_at__lte=dtv)
    if upcoming in ("1", "true", "yes"):
        qs = qs.filter(end_at__gte=timezone.now())
    return qs


def get_event_or_none(pk):
    try:
        return Event.objects.select_related("organizer", "parent_event").get(pk=pk)
    except Event.DoesNotExist:
        return None


def managed_event(request, pk):
    """
    Look up an event the requester organizes.

    Returns ``(event, None)`` on success or ``(None, Response)`` with the
    404/403 to send back.
    """
    event = get_event_or_none(pk)
    if event is None:
        return None, Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
    if not event.is_managed_by(request.user):
        return None, Response(
            {"error": "You are not the organizer of this event"},
            status=status.HTTP_403_FORBIDDEN,
        )
    return event, None


def client_ip(request):
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def decode_qr_from_uploaded(django_file):
    """
    Try to decode a QR code from an uploaded image.
    Returns the decoded string (payload) or None.
    """
    data = django_file.read()
    arr = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_COLOR)
    if img is None:
        return None
    detector = cv2.QRCodeDetector()
    text, points, _ = detector.detectAndDecode(img)
    return text.strip() if text else None
