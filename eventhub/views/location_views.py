# eventhub/views/location_views.py
import base64
import binascii

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..locations import CAMPUS_LOCATIONS, LocationError, classifier_enabled, predict_location
from ..serializers import LocationPredictionSerializer


class CampusLocationListView(APIView):
    """Known landmarks, for the event form's campus location picker."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({"locations": list(CAMPUS_LOCATIONS), "classifier_enabled": classifier_enabled()})


class PredictLocationView(APIView):
    """
    Detect which landmark the user is at.

    JSON or multipart: ``latitude``/``longitude``, an ``image`` upload or
    ``image_base64``, and optional ``gps_weight``/``ai_weight`` (default 40/60).
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LocationPredictionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        image_bytes = None
        if data.get("image") is not None:
            image_bytes = b"".join(data["image"].chunks())
        elif data.get("image_base64"):
            raw = data["image_base64"].split(",", 1)[-1]
            try:
                image_bytes = base64.b64decode(raw, validate=True)
            except (binascii.Error, ValueError):
                return Response({"error": "image_base64 is not valid base64"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = predict_location(
                latitude=data.get("latitude"),
                longitude=data.get("longitude"),
                image_bytes=image_bytes,
                gps_weight=data["gps_weight"],
                ai_weight=data["ai_weight"],
            )
        except LocationError as exc:
            return Response({"error": exc.message}, status=exc.status_code)
        return Response(result)
