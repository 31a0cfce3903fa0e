"""
Location Variants

Decoding of raw location entries into AddressLocation / GeoLocation and the
formatting rule used to show a check-in's location in one short line.
"""

import math
from typing import Any, Optional, Sequence

from config import settings
from data.models import AddressLocation, GeoLocation, LocationVariant
from utils.helpers import clean_string

LOCATION_MARKER = "📍"
GENERIC_LOCATION_LABEL = f"{LOCATION_MARKER} Location"

# Wire field name -> AddressLocation attribute
_ADDRESS_FIELDS = {
    "name": "name",
    "street": "street",
    "locality": "locality",
    "region": "region",
    "postalCode": "postal_code",
    "country": "country",
}


def _coordinate(value: Any) -> Optional[float]:
    """Parse a coordinate sent either as a JSON number or a decimal string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _decode_address(raw: dict) -> AddressLocation:
    values = {attr: clean_string(raw.get(key)) for key, attr in _ADDRESS_FIELDS.items()}
    return AddressLocation(**values)


def _decode_geo(raw: dict) -> Optional[GeoLocation]:
    latitude = _coordinate(raw.get("latitude"))
    longitude = _coordinate(raw.get("longitude"))
    if latitude is None or longitude is None:
        return None
    if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
        return None
    return GeoLocation(latitude=latitude, longitude=longitude)


def decode_location(raw: Any) -> Optional[LocationVariant]:
    """
    Decode one raw location entry.

    Args:
        raw: A JSON object carrying a $type discriminator

    Returns:
        Optional[LocationVariant]: The decoded variant, or None when the entry
        has an unknown type or malformed data
    """
    if not isinstance(raw, dict):
        return None

    kind = raw.get("$type")
    if kind == settings.ADDRESS_LOCATION_TYPE:
        return _decode_address(raw)
    if kind == settings.GEO_LOCATION_TYPE:
        return _decode_geo(raw)
    return None


def _address_label(address: AddressLocation) -> str:
    parts = [part for part in (address.name, address.locality) if part]
    return ", ".join(parts)


def format_locations(locations: Sequence[LocationVariant]) -> str:
    """
    Render a sequence of location variants as one short display string.

    The first address with a name or locality wins. An address with neither
    is skipped. A geo coordinate reached before any usable address is shown
    with the location marker. Anything else gets the generic marker.

    Args:
        locations: Location variants in record order

    Returns:
        str: The display string
    """
    for location in locations:
        if isinstance(location, AddressLocation):
            label = _address_label(location)
            if label:
                return label
        elif isinstance(location, GeoLocation):
            return f"{LOCATION_MARKER} {location.latitude}, {location.longitude}"
    return GENERIC_LOCATION_LABEL
