"""
Check-in Record Decoder

Turns the loosely-typed extension payload attached to a post into a
CheckinRecord. Anything that is not a check-in yields None; this is the
normal case for ordinary posts.
"""

from typing import Any, Optional

from config import settings
from data.locations import decode_location
from data.models import CheckinRecord
from utils.helpers import clean_string, parse_timestamp
from utils.logger import get_logger

logger = get_logger(__name__)


def is_checkin_payload(payload: Any) -> bool:
    """Check whether a payload carries the check-in record type."""
    return isinstance(payload, dict) and payload.get("$type") == settings.CHECKIN_RECORD_TYPE


def decode_checkin_record(payload: Any) -> Optional[CheckinRecord]:
    """
    Decode a check-in record from an extension payload.

    Each location is decoded on its own; entries with an unknown type or bad
    data are skipped and the rest of the record is kept.

    Args:
        payload: The raw payload, possibly None or of an unrelated type

    Returns:
        Optional[CheckinRecord]: The check-in, or None if the payload is not one
    """
    if not is_checkin_payload(payload):
        return None

    raw_locations = payload.get("locations")
    if not isinstance(raw_locations, list):
        raw_locations = []

    locations = []
    for index, raw in enumerate(raw_locations):
        location = decode_location(raw)
        if location is None:
            logger.debug(f"Skipping malformed location #{index} in check-in record")
            continue
        locations.append(location)

    return CheckinRecord(
        locations=tuple(locations),
        text=clean_string(payload.get("text")),
        created_at=parse_timestamp(payload.get("createdAt")),
    )
