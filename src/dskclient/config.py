"""Local configuration for dskclient."""

from __future__ import annotations

import os

DEFAULT_BASE_URL = "http://127.0.0.1:8080"
DEFAULT_API_PREFIX = "/api/v2"
DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_FETCH_MAX_RETRIES = 2
DEFAULT_FETCH_BACKOFF_S = 0.5
DEFAULT_USER_AGENT = "dskclient/0.1 (+https://github.com/rundsk/dsk)"

DSK_BASE_URL = os.getenv("DSK_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
DSK_API_PREFIX = "/" + os.getenv("DSK_API_PREFIX", DEFAULT_API_PREFIX).strip("/")
# Source (version) of the design definitions tree, empty means the primary one.
DSK_SOURCE = os.getenv("DSK_SOURCE") or None
DSK_FETCH_TIMEOUT_S = float(os.getenv("DSK_FETCH_TIMEOUT_S", str(DEFAULT_FETCH_TIMEOUT_S)))
DSK_FETCH_MAX_RETRIES = int(os.getenv("DSK_FETCH_MAX_RETRIES", str(DEFAULT_FETCH_MAX_RETRIES)))
DSK_FETCH_BACKOFF_S = float(os.getenv("DSK_FETCH_BACKOFF_S", str(DEFAULT_FETCH_BACKOFF_S)))
DSK_USER_AGENT = os.getenv("DSK_USER_AGENT", DEFAULT_USER_AGENT)
