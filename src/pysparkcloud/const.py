"""Constants for pysparkcloud library."""

from __future__ import annotations


VERSION = "0.1.0"

# API Configuration
DEFAULT_BASE_URL = "https://api.spark.io"
API_VERSION_PREFIX = "/v1"
DEFAULT_TIMEOUT = 10.0  # seconds

# Request Defaults
DEFAULT_USER_AGENT = f"pysparkcloud/{VERSION}"
DEFAULT_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Response Signals
ACTION_FAILED_RETURN_VALUE = -1

# Token Endpoints
OAUTH_PASSWORD_GRANT = "password"
