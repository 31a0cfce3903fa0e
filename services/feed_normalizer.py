"""
Feed Post Normalizer

This module maps raw getFeed entries onto FeedPost objects. It makes two
separate decisions per entry: whether the entry is kept at all (it needs a
URI, an author handle, text and a creation time) and whether the kept post
carries a check-in. A bad check-in never drops the post.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from data.models import Author, CheckinRecord, FeedPost, PostRecord
from services.checkin_decoder import decode_checkin_record
from utils.helpers import clean_string, parse_timestamp, safe_get
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NormalizedEntry:
    """Outcome of normalizing one feed entry."""
    post: Optional[FeedPost] = None
    drop_reason: Optional[str] = None

    @property
    def kept(self) -> bool:
        return self.post is not None

    @property
    def checkin_record(self) -> Optional[CheckinRecord]:
        return self.post.checkin_record if self.post is not None else None


def _dropped(reason: str) -> NormalizedEntry:
    return NormalizedEntry(post=None, drop_reason=reason)


def _checkin_candidates(record: dict) -> Iterable[Any]:
    """Places on a post record where a check-in payload may sit, in lookup order."""
    embed = record.get("embed")
    yield embed
    if isinstance(embed, dict):
        yield embed.get("record")
    yield record.get("checkin")


def extract_checkin_record(record: dict) -> Optional[CheckinRecord]:
    """
    Find and decode the check-in attached to a post record.

    Args:
        record: The raw post record

    Returns:
        Optional[CheckinRecord]: The first candidate that decodes, or None
    """
    for candidate in _checkin_candidates(record):
        checkin = decode_checkin_record(candidate)
        if checkin is not None:
            return checkin
    return None


def _parse_author(raw: Any) -> Optional[Author]:
    if not isinstance(raw, dict):
        return None
    handle = clean_string(raw.get("handle"))
    if handle is None:
        return None
    return Author(
        handle=handle,
        display_name=clean_string(raw.get("displayName")),
        avatar=clean_string(raw.get("avatar")),
        did=clean_string(raw.get("did")),
    )


def normalize_entry(entry: Any) -> NormalizedEntry:
    """
    Normalize one raw feed entry.

    Args:
        entry: A feed item as returned by app.bsky.feed.getFeed

    Returns:
        NormalizedEntry: The kept post, or the reason the entry was dropped
    """
    post = safe_get(entry, "post")
    if not isinstance(post, dict):
        return _dropped("entry has no post object")

    uri = clean_string(post.get("uri"))
    if uri is None:
        return _dropped("post has no uri")

    author = _parse_author(post.get("author"))
    if author is None:
        return _dropped(f"post {uri} has no author handle")

    record = post.get("record")
    if not isinstance(record, dict):
        return _dropped(f"post {uri} has no record")

    text = record.get("text")
    if not isinstance(text, str):
        return _dropped(f"post {uri} has no text")

    created_at = parse_timestamp(record.get("createdAt"))
    if created_at is None:
        return _dropped(f"post {uri} has no valid createdAt")

    facets = record.get("facets")
    facets = tuple(f for f in facets if isinstance(f, dict)) if isinstance(facets, list) else ()

    return NormalizedEntry(post=FeedPost(
        id=uri,
        author=author,
        record=PostRecord(text=text, created_at=created_at, facets=facets),
        checkin_record=extract_checkin_record(record),
        cid=clean_string(post.get("cid")),
        indexed_at=parse_timestamp(post.get("indexedAt")),
    ))


def normalize_feed(entries: Iterable[Any]) -> List[FeedPost]:
    """
    Normalize a page of feed entries, keeping server order.

    Entries missing required fields are logged and left out.

    Args:
        entries: Raw feed items

    Returns:
        List[FeedPost]: The surviving posts in their original order
    """
    posts = []
    dropped = 0
    for index, entry in enumerate(entries):
        result = normalize_entry(entry)
        if not result.kept:
            dropped += 1
            logger.warning(f"Dropping feed entry #{index}: {result.drop_reason}")
            continue
        posts.append(result.post)

    if dropped:
        logger.info(f"Normalized {len(posts)} posts, dropped {dropped} malformed entries")
    return posts
