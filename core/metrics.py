"""Prometheus metrics for monitoring."""

from prometheus_client import Counter, Gauge, Histogram

# Response time metrics
api_request_duration = Histogram(
    "api_request_duration_seconds", "API request duration in seconds", ["method", "endpoint", "status"]
)

# Report metrics
reports_total = Counter("reports_total", "Total number of reports filed", ["type"])

reports_escalated_total = Counter(
    "reports_escalated_total", "Total number of reports auto-escalated from their type", ["priority"]
)

reports_closed_total = Counter("reports_closed_total", "Total number of reports resolved or dismissed", ["status"])

reports_rejected_total = Counter("reports_rejected_total", "Total number of report submissions rejected", ["reason"])

reports_latency_seconds = Histogram(
    "reports_latency_seconds", "Time to process report creation from request to response"
)

urgent_reports_open = Gauge("urgent_reports_open", "Number of open reports currently considered urgent")

# Booking metrics
bookings_total = Counter("bookings_total", "Total number of booking writes", ["status"])

booking_conflicts_total = Counter("booking_conflicts_total", "Total number of booking requests rejected for overlap")

bookings_rejected_total = Counter("bookings_rejected_total", "Total number of booking requests rejected", ["reason"])

bookings_latency_seconds = Histogram(
    "bookings_latency_seconds", "Time to process booking creation from request to response"
)
