"""
Provider Lookup - Nearby healthcare facility search

Responsibilities:
- Geocode free-text location (address, zip code, city) to coordinates
- Search for hospitals, clinics, doctors and pharmacies around the point
- Return ProviderRecords sorted by distance

Backends:
- Geocoding: Nominatim-compatible search endpoint
  (GET ?format=json&q=<location>&limit=1)
- Facility search: Overpass API (POST data=<overpass QL>)

Design principles:
- Dependency injection (no singleton); endpoints, timeout, radius and
  result limit are constructor arguments
- Blocking calls with an explicit HTTP timeout
- Any failure to resolve the location raises ProviderLookupError; callers
  decide how to present it
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

import requests

from healthbot.contracts import ProviderRecord

logger = logging.getLogger(__name__)

DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"
DEFAULT_USER_AGENT = "healthbot-intake-assistant/1.0"

EARTH_RADIUS_MILES = 3958.8
METERS_PER_MILE = 1609.344

# OSM amenity/healthcare tag -> display type
FACILITY_TYPES = {
    'hospital': "Hospital",
    'clinic': "Medical Clinic",
    'doctors': "Doctor's Office",
    'pharmacy': "Pharmacy",
    'urgent_care': "Urgent Care",
}


class ProviderLookupError(Exception):
    """Location could not be resolved or the search backend failed"""


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in miles"""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(a))


def format_distance(miles: float) -> str:
    return f"{miles:.1f} miles"


class ProviderLookupService:
    """Geocode + Overpass facility search"""

    def __init__(
        self,
        geocoder_url: str = DEFAULT_GEOCODER_URL,
        overpass_url: str = DEFAULT_OVERPASS_URL,
        timeout: int = 10,
        radius_miles: float = 5.0,
        max_results: int = 5,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None
    ) -> None:
        """
        Args:
            geocoder_url: Nominatim-compatible search endpoint
            overpass_url: Overpass API interpreter endpoint
            timeout: Per-request timeout in seconds
            radius_miles: Search radius around the geocoded point
            max_results: Maximum number of providers returned
            user_agent: User-Agent header (Nominatim rejects anonymous clients)
            session: Optional requests.Session (tests inject a fake)
        """
        self.geocoder_url = geocoder_url
        self.overpass_url = overpass_url
        self.timeout = timeout
        self.radius_miles = radius_miles
        self.max_results = max_results
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': user_agent})

        logger.info(
            f"Provider lookup initialized (radius={radius_miles} mi, max_results={max_results})"
        )

    def find_nearby_providers(self, location_text: str) -> List[ProviderRecord]:
        """
        Find healthcare facilities near a location.

        Args:
            location_text: Address, zip code or place name

        Returns:
            list: Up to max_results ProviderRecords, nearest first.
                Empty if the location resolved but nothing was found.

        Raises:
            ProviderLookupError: If the location can't be geocoded or a
                backend request fails
        """
        if not location_text or not location_text.strip():
            raise ProviderLookupError("No location provided")

        logger.info(f"Searching for providers near: {location_text}")
        lat, lon = self.geocode(location_text)
        return self.search_facilities(lat, lon)

    def geocode(self, location_text: str) -> Tuple[float, float]:
        """
        Resolve a location to (lat, lon).

        Raises:
            ProviderLookupError: If the request fails or nothing matches
        """
        try:
            response = self.session.get(
                self.geocoder_url,
                params={'format': 'json', 'q': location_text, 'limit': 1},
                timeout=self.timeout,
            )
            response.raise_for_status()
            results = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderLookupError(f"Geocoding request failed: {e}") from e

        if not results:
            raise ProviderLookupError(
                f"Unable to find location '{location_text}'. Please check the address provided."
            )

        try:
            return float(results[0]['lat']), float(results[0]['lon'])
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderLookupError(f"Malformed geocoding result: {e}") from e

    def _build_query(self, lat: float, lon: float) -> str:
        radius_m = int(self.radius_miles * METERS_PER_MILE)
        amenities = "|".join(key for key in FACILITY_TYPES if key != 'urgent_care')
        return (
            "[out:json][timeout:25];("
            f'nwr["amenity"~"^({amenities})$"](around:{radius_m},{lat},{lon});'
            f'nwr["healthcare"="urgent_care"](around:{radius_m},{lat},{lon});'
            ");out center tags;"
        )

    def search_facilities(self, lat: float, lon: float) -> List[ProviderRecord]:
        """
        Query Overpass for facilities around a point.

        Raises:
            ProviderLookupError: If the request fails
        """
        try:
            response = self.session.post(
                self.overpass_url,
                data={'data': self._build_query(lat, lon)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            elements = response.json().get('elements', [])
        except (requests.RequestException, ValueError) as e:
            raise ProviderLookupError(f"Facility search failed: {e}") from e

        ranked = []
        for element in elements:
            parsed = self._parse_element(element, lat, lon)
            if parsed is not None:
                ranked.append(parsed)

        ranked.sort(key=lambda item: item[0])
        providers = [record for _, record in ranked[:self.max_results]]
        logger.info(f"Found {len(providers)} providers near ({lat:.4f}, {lon:.4f})")
        return providers

    @staticmethod
    def _parse_element(
        element: Dict[str, Any],
        origin_lat: float,
        origin_lon: float
    ) -> Optional[Tuple[float, ProviderRecord]]:
        """Overpass element -> (distance, ProviderRecord); None if unnamed or unplaced"""
        tags = element.get('tags', {})
        name = tags.get('name')
        if not name:
            return None

        # Ways/relations carry their coordinates in 'center'
        point = element if 'lat' in element else element.get('center', {})
        if 'lat' not in point or 'lon' not in point:
            return None

        miles = haversine_miles(origin_lat, origin_lon, float(point['lat']), float(point['lon']))

        kind = tags.get('amenity')
        if tags.get('healthcare') == 'urgent_care':
            kind = 'urgent_care'

        street = " ".join(part for part in (tags.get('addr:housenumber'), tags.get('addr:street')) if part)
        locality = ", ".join(
            part for part in (tags.get('addr:city'), tags.get('addr:state'), tags.get('addr:postcode')) if part
        )
        address = ", ".join(part for part in (street, locality) if part) or "Address unavailable"

        return miles, ProviderRecord(
            name=name,
            address=address,
            type=FACILITY_TYPES.get(kind, "Healthcare Facility"),
            phone=tags.get('phone') or tags.get('contact:phone'),
            website=tags.get('website') or tags.get('contact:website'),
            distance=format_distance(miles),
        )
