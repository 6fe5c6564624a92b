"""Service-wide constants."""

from __future__ import annotations

# Pagination
DEFAULT_PAGE_SIZE = 50
DEFAULT_BUCKET_SIZE = 10

# Access control
ACCESS_CHECK_SUBJECT = "dev.lfx.access_check.request"
ACCESS_CHECK_TIMEOUT_SECONDS = 15.0
ANONYMOUS_PRINCIPAL = "_anonymous"

# Cache hint returned for anonymous (public-only) responses
ANONYMOUS_CACHE_CONTROL = "public, max-age=300"

# HTTP
REQUEST_ID_HEADER = "X-REQUEST-ID"
