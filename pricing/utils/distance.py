# pricing/utils/distance.py

"""
Distance helpers for delivery pricing.

Delivery bands are stored as free text ("0-10 miles", "10–25 mi", "5 miles"),
so everything here tolerates sloppy input and never raises on it.
"""

from __future__ import annotations
import re
from decimal import Decimal
from typing import Optional, Tuple

from geopy.distance import geodesic

from pricing.constants import MAX_DELIVERY_MILES, MILES_PER_KM
from pricing.utils.money import to_decimal

_DASHES = re.compile(r"[–—−]")
_UNIT_WORDS = re.compile(r"\bmi(?:les?)?\b")
_RANGE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:-\s*(\d+(?:\.\d+)?))?")


def parse_range_bounds(range_text: str | None) -> Tuple[Decimal, Decimal]:
    """
    Parse "(min, max)" miles from a band label.

    "0-10 miles" -> (0, 10). A single number is an upper bound, so
    "5 miles" -> (0, 5). The upper bound is capped
    at MAX_DELIVERY_MILES. Unparseable labels give (0, 0).
    """
    if not range_text:
        return Decimal("0"), Decimal("0")

    text = _DASHES.sub("-", str(range_text).lower())
    text = _UNIT_WORDS.sub("", text)
    text = re.sub(r"[^\d.\-\s]", "", text).strip()

    match = _RANGE.search(text)
    if not match:
        return Decimal("0"), Decimal("0")

    if match.group(2):
        low, high = Decimal(match.group(1)), Decimal(match.group(2))
    else:
        low, high = Decimal("0"), Decimal(match.group(1))
    return low, min(high, MAX_DELIVERY_MILES)


def distance_miles_between(origin, destination) -> Optional[Decimal]:
    """
    Geodesic distance in miles between two (latitude, longitude) pairs.
    Returns None when either side is missing a coordinate.
    """
    if not origin or not destination:
        return None
    if any(c is None for c in (*origin, *destination)):
        return None

    distance_km = geodesic(tuple(origin), tuple(destination)).km
    miles = Decimal(str(distance_km)) * MILES_PER_KM
    return miles.quantize(Decimal("0.01"))


def coerce_coordinates(value) -> Optional[Tuple[float, float]]:
    """Accept {"lat", "lng"} / {"latitude", "longitude"} dicts or 2-item sequences."""
    if not value:
        return None
    if isinstance(value, dict):
        lat = value.get("lat", value.get("latitude"))
        lng = value.get("lng", value.get("lon", value.get("longitude")))
    else:
        try:
            lat, lng = value
        except (TypeError, ValueError):
            return None
    lat = to_decimal(lat, default=None)
    lng = to_decimal(lng, default=None)
    if lat is None or lng is None:
        return None
    return float(lat), float(lng)


def get_service_address(service: dict) -> str:
    """
    Best origin address for a service's distance lookups.

    Vendor full address first, then the service's own location (when it is
    more than a stub), then an address assembled from vendor components.
    """
    vendor = service.get("vendor") or {}

    full_address = vendor.get("full_address") or vendor.get("fullAddress")
    if full_address:
        return full_address

    location = service.get("location") or ""
    if len(location.strip()) > 3:
        return location

    city = vendor.get("city")
    state = vendor.get("state")
    if city and state:
        parts = []
        if vendor.get("address"):
            parts.append(vendor["address"])
        parts.append(city)
        zip_code = vendor.get("zip_code") or vendor.get("zipCode")
        parts.append(f"{state} {zip_code}" if zip_code else state)
        return ", ".join(parts)

    return ""
