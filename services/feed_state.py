"""
Feed Fetch States

The four states a FeedService can be in. Each state is an immutable value,
so replacing the current state is a single assignment that readers always
see whole.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from data.models import FeedPost
from utils.exceptions import FeedError


@dataclass(frozen=True)
class Idle:
    """Nothing has been fetched yet."""


@dataclass(frozen=True)
class Loading:
    """A fetch is in flight."""


@dataclass(frozen=True)
class Loaded:
    """The last fetch succeeded."""
    posts: Tuple[FeedPost, ...] = ()


@dataclass(frozen=True)
class Failed:
    """The last fetch failed; no posts are usable."""
    error: FeedError


FeedFetchState = Union[Idle, Loading, Loaded, Failed]
