# infrastructure/metrics/metrics.py
from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

notifications_created_total = Counter(
    "notifications_created_total",
    "Notifications created by the scan",
    ["kind"]  # overdue|upcoming|stock_low
)

notification_scan_failures_total = Counter(
    "notification_scan_failures_total",
    "Scan entries that did not produce a notification",
    ["kind", "reason"]  # reason: validation|storage
)

installments_rescheduled_total = Counter(
    "installments_rescheduled_total",
    "Pending installments moved after a payment"
)

payments_recorded_total = Counter(
    "payments_recorded_total",
    "Payment attempts by outcome",
    ["outcome"]  # paid|partial|out_of_order|error
)


def metrics_endpoint():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
