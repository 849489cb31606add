"""Prometheus metrics shared by upload-related modules."""

from prometheus_client import Counter


UPLOAD_ATTEMPTS = Counter(
    "image_upload_attempts_total",
    "Total number of complaint image upload attempts",
    ["slot"],
)
UPLOAD_SUCCESSES = Counter(
    "image_upload_success_total",
    "Total number of successful complaint image uploads",
    ["slot"],
)
UPLOAD_FAILURES = Counter(
    "image_upload_failure_total",
    "Total number of failed complaint image uploads",
    ["slot"],
)
MEDIA_DELETE_FAILURES = Counter(
    "media_delete_failure_total",
    "Superseded images that could not be removed from media storage",
)
