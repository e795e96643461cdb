# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics: single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "gearguard_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "gearguard_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "gearguard_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
MAINTENANCE_REQUESTS_CREATED = Counter(
    "maintenance_requests_created_total",
    "Total maintenance requests created",
    ["type", "priority"],
)
MAINTENANCE_REQUESTS_TOTAL = Gauge(
    "maintenance_requests_total",
    "Current maintenance requests by status",
    ["status"],
)
STATUS_TRANSITIONS = Counter(
    "maintenance_request_transitions_total",
    "Status transitions applied to maintenance requests",
    ["from_status", "to_status"],
)
MEMBERSHIP_DENIALS = Counter(
    "maintenance_membership_denials_total",
    "Operations rejected because the user is not a team member",
    ["operation"],
)
REPAIR_DURATION_HOURS = Histogram(
    "maintenance_repair_duration_hours",
    "Reported repair duration (hours)",
    buckets=[0.5, 1, 2, 4, 8, 16, 24, 48],
)
EQUIPMENT_SCRAPPED = Counter(
    "equipment_scrapped_total",
    "Equipment marked SCRAPPED by the request workflow",
)
