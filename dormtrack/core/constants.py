from __future__ import annotations

"""
Core application constants.

These values centralize pagination defaults, header names and the
fallback text used when a report is filed without a location.
"""

# Report listing
DEFAULT_PAGE: int = 1
DEFAULT_PAGE_SIZE: int = 10
MIN_PAGE_SIZE: int = 5
MAX_PAGE_SIZE: int = 50

# Technician history (cursor pagination)
DEFAULT_HISTORY_LIMIT: int = 20
MAX_HISTORY_LIMIT: int = 50

# Timing summary row sample
DEFAULT_TIMING_LIMIT: int = 50
MIN_TIMING_LIMIT: int = 10
MAX_TIMING_LIMIT: int = 200

# Common HTTP header names
HEADER_REQUEST_ID: str = "X-Request-ID"
HEADER_PROCESS_TIME: str = "X-Process-Time"

# Location recorded when neither the form nor the reporter supplies one
UNKNOWN_LOCATION: str = "Tidak diketahui"
