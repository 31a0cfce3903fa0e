"""
Data Models for the Check-in Feed Client

This module contains the immutable data classes that flow out of the feed
pipeline: authors, post records, check-in records with their location
variants, and the normalized feed post.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple, Union

from config import settings
from data.rich_text import render_facets


@dataclass(frozen=True)
class Author:
    """Author of a feed post."""
    handle: str                         # Unique remote identifier
    display_name: Optional[str] = None
    avatar: Optional[str] = None        # Avatar image URL
    did: Optional[str] = None           # BlueSky DID

    @property
    def label(self) -> str:
        """Name to show for the author, falling back to the handle."""
        return self.display_name or self.handle

    @property
    def profile_url(self) -> str:
        return settings.PROFILE_URL_TEMPLATE.format(handle=self.handle)


@dataclass(frozen=True)
class PostRecord:
    """The generic social-post payload of a feed entry."""
    text: str
    created_at: datetime
    facets: Tuple[dict, ...] = field(default=(), hash=False)  # Raw rich text facets

    @property
    def formatted_text(self) -> str:
        """Post text with link and mention facets rendered as Markdown links."""
        return render_facets(self.text, self.facets)


@dataclass(frozen=True)
class AddressLocation:
    """Street-address style location."""
    name: Optional[str] = None
    street: Optional[str] = None
    locality: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class GeoLocation:
    """Raw geographic coordinate."""
    latitude: float
    longitude: float


# Exactly one of the two shapes; formatting switches on the concrete type.
LocationVariant = Union[AddressLocation, GeoLocation]


@dataclass(frozen=True)
class CheckinRecord:
    """Structured check-in extension attached to a post."""
    locations: Tuple[LocationVariant, ...] = ()
    text: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class FeedPost:
    """A normalized entry of the global feed."""
    id: str                             # AT URI of the post
    author: Author
    record: PostRecord
    checkin_record: Optional[CheckinRecord] = None
    cid: Optional[str] = None
    indexed_at: Optional[datetime] = None

    @property
    def location_label(self) -> Optional[str]:
        """
        Short location string for check-ins that carry locations.

        Returns:
            Optional[str]: The formatted location, or None for plain posts
            and check-ins without any location
        """
        # Imported here to avoid a cycle with data.locations
        from data.locations import format_locations

        if self.checkin_record is None or not self.checkin_record.locations:
            return None
        return format_locations(self.checkin_record.locations)


@dataclass(frozen=True)
class Credentials:
    """Session credentials supplied by the authentication collaborator."""
    handle: str
    did: str
    access_jwt: str
    refresh_jwt: Optional[str] = None
    pds_url: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credentials(handle={self.handle!r}, did={self.did!r})"
