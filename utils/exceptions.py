"""
Custom Exception Classes for the Check-in Feed Client

This module defines custom exceptions for better error handling and
categorization of failures across the application.
"""

from typing import Optional


class CheckinFeedError(Exception):
    """Base exception for all check-in feed client errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(CheckinFeedError):
    """Raised when configuration validation fails or required settings are missing."""
    pass


# =============================================================================
# Social Media Errors
# =============================================================================

class SocialMediaError(CheckinFeedError):
    """Base exception for social media platform errors."""
    pass


class AuthenticationError(SocialMediaError):
    """Raised when authentication with the AT Protocol service fails."""
    pass


# =============================================================================
# Feed Errors
# =============================================================================

class FeedError(CheckinFeedError):
    """Base exception for errors that put the feed into the failed state."""
    pass


class FeedTransportError(FeedError):
    """Raised when the feed request could not complete."""

    def __init__(self, message: str, status_code: Optional[int] = None, retryable: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class FeedDecodeError(FeedError):
    """Raised when the feed response is not a valid feed envelope."""
    pass


class FetchCancelledError(FeedError):
    """Raised when an in-flight feed fetch is cancelled by its consumer."""
    pass
