"""Prometheus metrics definitions for Mandrill Mailer."""

from prometheus_client import Counter, Histogram

# Counter metrics
mandrill_messages_total = Counter(
    "mandrill_messages_total",
    "Total number of messages handed to the mailer",
    ["result"],  # sent, failed
)

mandrill_recipients_total = Counter(
    "mandrill_recipients_total",
    "Total number of per-recipient delivery records",
    ["status"],  # sent, queued, scheduled, rejected, invalid, unknown, malformed
)

mandrill_api_errors_total = Counter(
    "mandrill_api_errors_total",
    "Total number of Mandrill API errors",
    ["error_type"],  # Invalid_Key, ValidationError, HttpError, ...
)

# Histogram metrics
mandrill_api_latency_seconds = Histogram(
    "mandrill_api_latency_seconds",
    "Mandrill API request latency in seconds",
    ["endpoint", "status"],  # endpoint: messages/send, templates/render; status: success, error
    buckets=(0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)
