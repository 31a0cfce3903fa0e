"""
Rich Text Rendering

Converts AT Protocol rich text facets into Markdown links. Facet ranges are
UTF-8 byte offsets into the post text.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from config import settings

LINK_FEATURE = "app.bsky.richtext.facet#link"
MENTION_FEATURE = "app.bsky.richtext.facet#mention"
TAG_FEATURE = "app.bsky.richtext.facet#tag"

HASHTAG_URL_TEMPLATE = "https://bsky.app/hashtag/{tag}"


def _is_char_boundary(data: bytes, offset: int) -> bool:
    if offset == 0 or offset == len(data):
        return True
    # UTF-8 continuation bytes look like 0b10xxxxxx
    return (data[offset] & 0xC0) != 0x80


def _feature_target(features: Any) -> Optional[str]:
    """Return the URL a facet should link to, or None if it has no usable feature."""
    if not isinstance(features, list):
        return None

    for feature in features:
        if not isinstance(feature, dict):
            continue
        kind = feature.get("$type")
        if kind == LINK_FEATURE and isinstance(feature.get("uri"), str):
            return feature["uri"]
        if kind == MENTION_FEATURE and isinstance(feature.get("did"), str):
            return settings.PROFILE_URL_TEMPLATE.format(handle=feature["did"])
        if kind == TAG_FEATURE and isinstance(feature.get("tag"), str):
            return HASHTAG_URL_TEMPLATE.format(tag=feature["tag"])
    return None


def _valid_spans(data: bytes, facets: Sequence[Dict[str, Any]]) -> List[Tuple[int, int, str]]:
    spans = []
    for facet in facets:
        if not isinstance(facet, dict) or not isinstance(facet.get("index"), dict):
            continue
        start = facet["index"].get("byteStart")
        end = facet["index"].get("byteEnd")
        if not isinstance(start, int) or not isinstance(end, int) or isinstance(start, bool) or isinstance(end, bool):
            continue
        if not 0 <= start < end <= len(data):
            continue
        if not (_is_char_boundary(data, start) and _is_char_boundary(data, end)):
            continue
        target = _feature_target(facet.get("features"))
        if target is None:
            continue
        spans.append((start, end, target))

    spans.sort(key=lambda span: span[0])

    # Drop anything overlapping an earlier span
    result = []
    last_end = 0
    for start, end, target in spans:
        if start < last_end:
            continue
        result.append((start, end, target))
        last_end = end
    return result


def render_facets(text: str, facets: Sequence[Dict[str, Any]]) -> str:
    """
    Render link, mention and tag facets of a post as Markdown links.

    Facets that are malformed, out of range, split a character, or overlap an
    earlier facet are ignored.

    Args:
        text: The raw post text
        facets: Raw facet dictionaries from the post record

    Returns:
        str: The text with facet ranges replaced by [label](target) links
    """
    if not text or not facets:
        return text

    data = text.encode("utf-8")
    spans = _valid_spans(data, facets)
    if not spans:
        return text

    pieces = []
    cursor = 0
    for start, end, target in spans:
        pieces.append(data[cursor:start].decode("utf-8"))
        label = data[start:end].decode("utf-8").replace("]", "\\]")
        pieces.append(f"[{label}]({target})")
        cursor = end
    pieces.append(data[cursor:].decode("utf-8"))
    return "".join(pieces)
