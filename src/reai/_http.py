"""HTTP constants used by both the provider adapters and the listing clients."""

from __future__ import annotations

# A provider failure with one of these statuses may succeed on a later call.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})

# Default timeout for listing-provider HTTP calls, in seconds.
DEFAULT_HTTP_TIMEOUT_S: float = 30.0
