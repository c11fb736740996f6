"""
eventhub/locations.py
---------------------
Campus location detection for the event form.

A position is matched against the campus landmarks by great-circle
distance. When an image classifier is configured (Roboflow), a photo of the
spot can be classified as well and the two guesses are blended with
weights that are normalised to sum to 100.
"""

import base64
import logging
import math

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

CAMPUS_LOCATIONS = (
    {"name": "Main Gate", "lat": 12.863788, "lng": 77.434897},
    {"name": "Cross Road", "lat": 12.86279, "lng": 77.437411},
    {"name": "Block 1", "lat": 12.863154, "lng": 77.437718},
    {"name": "Students Square", "lat": 12.862314, "lng": 77.43824},
    {"name": "Open Auditorium", "lat": 12.86251, "lng": 77.438496},
    {"name": "Block 4", "lat": 12.862211, "lng": 77.43886},
    {"name": "Xpress Cafe", "lat": 12.862045, "lng": 77.439374},
    {"name": "Block 6", "lat": 12.862103, "lng": 77.439809},
    {"name": "Amphi Theater", "lat": 12.861424, "lng": 77.438057},
    {"name": "PU Block", "lat": 12.860511, "lng": 77.437249},
    {"name": "Architecture Block", "lat": 12.860132, "lng": 77.438592},
)
LOCATION_NAMES = tuple(loc["name"] for loc in CAMPUS_LOCATIONS)

EARTH_RADIUS_M = 6371e3
# confidence falls linearly from 1 at the landmark to 0 at this distance
CONFIDENCE_RADIUS_M = 200
MAX_MATCH_DISTANCE_M = 500
BOUNDS_BUFFER_DEG = 0.002

DEFAULT_GPS_WEIGHT = 40
DEFAULT_AI_WEIGHT = 60
CLASSIFIER_TIMEOUT = 30


class LocationError(Exception):
    """No location could be determined. Carries the HTTP status to answer with."""

    def __init__(self, message, status_code=422):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def calculate_distance(lat1, lng1, lat2, lng2):
    """Haversine distance in metres."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _confidence(distance):
    return max(0.0, min(1.0, 1 - distance / CONFIDENCE_RADIUS_M))


def find_nearest_locations(lat, lng):
    """Every landmark with its distance and confidence, nearest first."""
    matches = []
    for loc in CAMPUS_LOCATIONS:
        distance = calculate_distance(lat, lng, loc["lat"], loc["lng"])
        matches.append({
            "name": loc["name"],
            "distance": distance,
            "confidence": _confidence(distance),
            "coordinates": {"lat": loc["lat"], "lng": loc["lng"]},
        })
    return sorted(matches, key=lambda m: m["distance"])


def best_gps_match(lat, lng):
    """Nearest landmark, or None when it is further than 500 m away."""
    nearest = find_nearest_locations(lat, lng)[0]
    if nearest["distance"] > MAX_MATCH_DISTANCE_M:
        return None
    return nearest


def is_within_campus_bounds(lat, lng):
    lats = [loc["lat"] for loc in CAMPUS_LOCATIONS]
    lngs = [loc["lng"] for loc in CAMPUS_LOCATIONS]
    return (
        min(lats) - BOUNDS_BUFFER_DEG <= lat <= max(lats) + BOUNDS_BUFFER_DEG
        and min(lngs) - BOUNDS_BUFFER_DEG <= lng <= max(lngs) + BOUNDS_BUFFER_DEG
    )


def normalize_weights(gps_weight, ai_weight):
    """Scale the pair so it sums to 100. Two zero weights become 50/50."""
    total = gps_weight + ai_weight
    if total <= 0:
        return 50, 50
    return round(gps_weight / total * 100), round(ai_weight / total * 100)


def agreement_boost(gps_match, ai_prediction):
    """Average confidence raised by 20% (capped at 1) when both sources agree, else 0."""
    if not gps_match or not ai_prediction or gps_match["name"] != ai_prediction["predicted_class"]:
        return 0.0
    average = (gps_match["confidence"] + ai_prediction["confidence"]) / 2
    return min(1.0, average * 1.2)


def combine_predictions(gps_match, ai_prediction, gps_weight=DEFAULT_GPS_WEIGHT, ai_weight=DEFAULT_AI_WEIGHT):
    """
    Blend a GPS match and a classifier prediction into one score per location.

    Each location scores ``gps_w * gps_confidence`` (only the matched
    landmark) plus ``ai_w * probability``. The best score wins and the
    contributions say how much of it came from each source.

    Raises:
        LocationError: neither source produced anything.
    """
    if not gps_match and not ai_prediction:
        raise LocationError("No GPS or image prediction data available", status_code=400)

    gps_w, ai_w = (w / 100 for w in normalize_weights(gps_weight, ai_weight))
    scores = {}
    if gps_match:
        scores[gps_match["name"]] = gps_w * gps_match["confidence"]
    if ai_prediction:
        for name, probability in ai_prediction["probabilities"].items():
            scores[name] = scores.get(name, 0.0) + ai_w * probability

    best = max(scores, key=scores.get)
    best_score = scores[best]
    gps_part = gps_w * gps_match["confidence"] if gps_match and gps_match["name"] == best else 0.0
    ai_part = ai_w * ai_prediction["probabilities"].get(best, 0.0) if ai_prediction else 0.0

    if gps_match and ai_prediction:
        method = "hybrid"
    elif gps_match:
        method = "gps-only"
    else:
        method = "ai-only"

    return {
        "final_location": best,
        "final_confidence": best_score,
        "gps_contribution": gps_part / best_score * 100 if best_score else 0.0,
        "ai_contribution": ai_part / best_score * 100 if best_score else 0.0,
        "agreement_boost": agreement_boost(gps_match, ai_prediction),
        "method": method,
        "location_scores": scores,
    }


def location_suggestions(gps_match, ai_prediction, limit=3):
    """Top candidates from either source, merged when both name the same spot."""
    suggestions = {}
    if gps_match:
        suggestions[gps_match["name"]] = {
            "location": gps_match["name"], "confidence": gps_match["confidence"], "source": "gps",
        }
    if ai_prediction:
        ranked = sorted(ai_prediction["probabilities"].items(), key=lambda kv: kv[1], reverse=True)[:limit]
        for name, probability in ranked:
            if name in suggestions:
                existing = suggestions[name]
                existing["confidence"] = max(existing["confidence"], probability)
                existing["source"] = "both"
            else:
                suggestions[name] = {"location": name, "confidence": probability, "source": "ai"}
    return sorted(suggestions.values(), key=lambda s: s["confidence"], reverse=True)[:limit]


def classifier_enabled():
    return bool(settings.ROBOFLOW_API_KEY)


def classify_image(image_bytes):
    """
    Ask the Roboflow model which landmark the photo shows.

    Returns ``{"predicted_class", "confidence", "probabilities"}`` or None
    when the classifier is not configured, fails or sees nothing.
    """
    if not classifier_enabled() or not image_bytes:
        return None
    url = f"https://serverless.roboflow.com/{settings.ROBOFLOW_MODEL_ID}"
    try:
        response = requests.post(
            url,
            params={"api_key": settings.ROBOFLOW_API_KEY},
            data=base64.b64encode(image_bytes),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=CLASSIFIER_TIMEOUT,
        )
        response.raise_for_status()
        predictions = response.json().get("predictions") or []
    except (requests.exceptions.RequestException, ValueError) as exc:
        logger.warning("Location classifier request failed: %s", exc)
        return None

    if not predictions:
        logger.info("Location classifier returned no predictions")
        return None
    probabilities = {}
    for pred in predictions:
        probabilities[pred["class"]] = float(pred["confidence"])
    top = max(probabilities, key=probabilities.get)
    return {"predicted_class": top, "confidence": probabilities[top], "probabilities": probabilities}


def predict_location(latitude=None, longitude=None, image_bytes=None,
                     gps_weight=DEFAULT_GPS_WEIGHT, ai_weight=DEFAULT_AI_WEIGHT):
    """
    Detect the campus location from coordinates and/or a photo.

    A source with weight 0 is skipped. Without a configured classifier the
    photo is ignored and detection is GPS-only.

    Raises:
        LocationError: 400 when no usable input was given, 422 when the
            inputs did not resolve to a landmark.
    """
    has_position = latitude is not None and longitude is not None
    if not has_position and not image_bytes:
        raise LocationError(
            "Please provide GPS coordinates or an image of the location", status_code=400
        )

    gps_match = None
    if gps_weight > 0 and has_position:
        gps_match = best_gps_match(latitude, longitude)

    ai_prediction = None
    if ai_weight > 0 and image_bytes:
        ai_prediction = classify_image(image_bytes)

    if not gps_match and not ai_prediction:
        raise LocationError("No location could be determined")

    result = combine_predictions(gps_match, ai_prediction, gps_weight, ai_weight)
    result["within_campus"] = is_within_campus_bounds(latitude, longitude) if has_position else None
    result["gps_data"] = gps_match
    result["ai_data"] = ai_prediction
    result["suggestions"] = location_suggestions(gps_match, ai_prediction)
    logger.info("Location detected: %s (%s, %.2f)", result["final_location"], result["method"], result["final_confidence"])
    return result
