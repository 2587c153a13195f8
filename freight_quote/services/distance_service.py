"""
Distance Service - Google Distance Matrix with local fallback

Estimates road distance and transit time between two pincodes:
- Google Distance Matrix for driving distance (single attempt, bounded)
- Haversine distance over the bundled pincode coordinates on any failure
- Fixed default when a pincode has no known coordinates
"""

import asyncio
import logging
import math
from typing import Dict, Optional

import httpx
from pydantic import BaseModel

from freight_quote.config import settings
from freight_quote.core.pincode_coordinates import load_pincode_coordinates

logger = logging.getLogger(__name__)

# Surface freight covers roughly 400 km a day
KM_PER_DAY = 400
EARTH_RADIUS_KM = 6371

DEFAULT_ESTIMATED_DAYS = 1
DEFAULT_DISTANCE_TEXT = "100 km"


class DistanceEstimate(BaseModel):
    """Distance and transit time for a route."""
    distance: str
    estimated_days: float
    source: str = "google"


class DistanceLookupError(Exception):
    """Raised when the distance provider returns no usable result."""
    pass


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in km."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


class DistanceService:
    """
    Service for route distance estimation.

    `resolve` never raises: the provider is tried once, and every failure
    (missing key, transport error, timeout, non-OK status, malformed body)
    falls back to the local coordinate table.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        coordinates: Optional[Dict[str, Dict[str, float]]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = settings.GOOGLE_MAPS_API_KEY if api_key is None else api_key
        self.url = url or settings.GOOGLE_DISTANCE_MATRIX_URL
        self.timeout = timeout or settings.DISTANCE_API_TIMEOUT
        if coordinates is None:
            coordinates = load_pincode_coordinates(settings.PINCODE_COORDINATES_PATH)
        self.coordinates = coordinates
        self.client = client

    async def resolve(
        self,
        origin_pincode: int,
        destination_pincode: int,
        log: Optional[logging.LoggerAdapter] = None,
    ) -> DistanceEstimate:
        """Distance and estimated transit days between two pincodes."""
        log = log or logger

        if not self.api_key:
            log.warning("Google Maps API key not configured, using local distance")
            return self.estimate_locally(origin_pincode, destination_pincode, log)

        try:
            return await asyncio.wait_for(
                self._fetch(origin_pincode, destination_pincode),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            log.warning(
                f"Distance Matrix timed out after {self.timeout}s "
                f"for {origin_pincode}->{destination_pincode}"
            )
        except Exception as e:
            log.warning(f"Distance Matrix error for {origin_pincode}->{destination_pincode}: {e}")

        return self.estimate_locally(origin_pincode, destination_pincode, log)

    async def _fetch(self, origin_pincode: int, destination_pincode: int) -> DistanceEstimate:
        params = {
            "origins": str(origin_pincode),
            "destinations": str(destination_pincode),
            "key": self.api_key,
        }
        if self.client is not None:
            response = await self.client.get(self.url, params=params)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.url, params=params, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()

        if data.get("status") != "OK":
            raise DistanceLookupError(f"Distance Matrix status {data.get('status')}")

        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            raise DistanceLookupError("Distance Matrix response has no elements")

        if element.get("status", "OK") != "OK":
            raise DistanceLookupError(f"Distance Matrix element status {element.get('status')}")

        distance = element.get("distance") or {}
        meters = distance.get("value")
        text = distance.get("text")
        if not isinstance(meters, (int, float)) or not text:
            raise DistanceLookupError("Distance Matrix element has no distance")

        return DistanceEstimate(
            distance=text,
            estimated_days=round(meters / (KM_PER_DAY * 1000), 2),
            source="google",
        )

    def estimate_locally(
        self,
        origin_pincode: int,
        destination_pincode: int,
        log: Optional[logging.LoggerAdapter] = None,
    ) -> DistanceEstimate:
        """Haversine estimate from the coordinate table, or the fixed default."""
        log = log or logger
        origin = self.coordinates.get(str(origin_pincode))
        destination = self.coordinates.get(str(destination_pincode))

        if not origin or not destination:
            missing = [
                str(p) for p, point in ((origin_pincode, origin), (destination_pincode, destination))
                if not point
            ]
            log.warning(f"No coordinates for pincode(s) {', '.join(missing)}, using default distance")
            return DistanceEstimate(
                distance=DEFAULT_DISTANCE_TEXT,
                estimated_days=DEFAULT_ESTIMATED_DAYS,
                source="default",
            )

        km = haversine_km(origin["lat"], origin["lng"], destination["lat"], destination["lng"])
        return DistanceEstimate(
            distance=f"{round(km)} km",
            estimated_days=max(1, math.ceil(km / KM_PER_DAY)),
            source="haversine",
        )
