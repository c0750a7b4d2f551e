# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Prometheus metrics for the check-in service."""
from prometheus_client import Counter, Histogram

REGISTRATIONS_TOTAL = Counter(
    "checkin_registrations_total", "Total visitors registered"
)
CHECKINS_TOTAL = Counter(
    "checkin_visits_total", "Total visits recorded", ["flow"]
)
DUPLICATE_CHECKINS = Counter(
    "checkin_duplicates_suppressed_total", "Check-ins rejected inside the duplicate window"
)
LOGIN_FAILURES = Counter(
    "checkin_login_failures_total", "Failed visitor logins", ["reason"]
)
LOOKUPS_RATE_LIMITED = Counter(
    "checkin_lookups_rate_limited_total", "Lookup requests rejected by the rate limiter", ["endpoint"]
)
REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "http_errors_total", "Total HTTP errors", ["method", "endpoint", "status"]
)
