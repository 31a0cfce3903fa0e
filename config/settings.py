"""
Configuration Settings for the Check-in Feed Client

This module centralizes all configuration settings for the application,
including environment variables, service endpoints, and fetch tuning.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

from config.validators import validate_settings, get_config_summary

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))

# AT Protocol (BlueSky) Authentication
AT_PROTOCOL_USERNAME = os.getenv("AT_PROTOCOL_USERNAME")
AT_PROTOCOL_PASSWORD = os.getenv("AT_PROTOCOL_PASSWORD")
AT_PROTOCOL_SERVICE = os.getenv("AT_PROTOCOL_SERVICE", "https://bsky.social")

# =============================================================================
# Feed Settings
# =============================================================================

# getFeed host for sessions without a PDS endpoint; normally the PDS is used
FEED_SERVICE_URL = os.getenv("FEED_SERVICE_URL", "https://api.bsky.app")

# Feed generator publishing the global check-in feed
FEED_URI = os.getenv("FEED_URI", "")

FEED_FETCH_LIMIT = int(os.getenv("FEED_FETCH_LIMIT", "50"))        # Posts per page (1-100)
FEED_REQUEST_TIMEOUT = float(os.getenv("FEED_REQUEST_TIMEOUT", "15"))  # Seconds

# Retry of transient transport failures within a single fetch
FEED_FETCH_MAX_ATTEMPTS = int(os.getenv("FEED_FETCH_MAX_ATTEMPTS", "3"))
FEED_RETRY_DELAY = float(os.getenv("FEED_RETRY_DELAY", "1"))       # Seconds before the first retry
FEED_RETRY_BACKOFF = float(os.getenv("FEED_RETRY_BACKOFF", "2"))   # Delay multiplier per attempt

# =============================================================================
# Check-in Record Settings
# =============================================================================

CHECKIN_RECORD_TYPE = "app.dropanchor.checkin"
ADDRESS_LOCATION_TYPE = "community.lexicon.location.address"
GEO_LOCATION_TYPE = "community.lexicon.location.geo"

# =============================================================================
# HTTP Settings
# =============================================================================

USER_AGENT = 'checkin-feed/1.0 (+https://bsky.app)'
REQUEST_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'application/json',
}

# Profile links shown next to authors
PROFILE_URL_TEMPLATE = "https://bsky.app/profile/{handle}"
