from django.db import DatabaseError, connection
from django.utils import timezone

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class HealthView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
            database = "connected"
        except DatabaseError:
            database = "unavailable"
        healthy = database == "connected"
        return Response(
            {
                "status": "ok" if healthy else "degraded",
                "timestamp": timezone.now().isoformat(),
                "database": database,
            },
            status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
