"""Prometheus metrics definitions for s3agent.

All s3agent metrics use the ``s3agent_`` prefix for namespace isolation.
They are created only by :func:`init_metrics`; until then every
module-level reference stays ``None`` and :func:`record_operation` is a
no-op, so an agent with metrics disabled registers nothing in the global
registry.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# ---------------------------------------------------------------------------
# Operation counter and latency  (labels: operation, status)
# ---------------------------------------------------------------------------
operations_total: Counter | None = None
request_duration_seconds: Histogram | None = None

# ---------------------------------------------------------------------------
# Byte counters
# ---------------------------------------------------------------------------
bytes_sent_total: Counter | None = None
bytes_received_total: Counter | None = None


def init_metrics() -> None:
    """Create and register all Prometheus metrics.

    Safe to call more than once; only the first call registers collectors.
    """
    global _initialized
    global operations_total, request_duration_seconds
    global bytes_sent_total, bytes_received_total

    if _initialized:
        return

    operations_total = Counter(
        "s3agent_operations_total",
        "Total object storage operations by type and HTTP status",
        ["operation", "status"],
    )

    request_duration_seconds = Histogram(
        "s3agent_request_duration_seconds",
        "Round-trip time of one operation through the transport",
        ["operation"],
    )

    bytes_sent_total = Counter(
        "s3agent_bytes_sent_total",
        "Total declared bytes sent in request bodies",
    )

    bytes_received_total = Counter(
        "s3agent_bytes_received_total",
        "Total bytes received in response bodies",
    )

    _initialized = True


def record_operation(
    operation: str,
    status: int | str,
    duration_seconds: float,
    bytes_sent: int = 0,
    bytes_received: int = 0,
) -> None:
    """Record one completed round trip. No-op until init_metrics() runs.

    Args:
        operation: Lowercase operation name (e.g. "put").
        status: HTTP status code, or "error" when the transport failed.
        duration_seconds: Wall time of the transport call.
        bytes_sent: Declared request body length.
        bytes_received: Response body length.
    """
    if not _initialized:
        return
    operations_total.labels(operation=operation, status=str(status)).inc()
    request_duration_seconds.labels(operation=operation).observe(duration_seconds)
    if bytes_sent:
        bytes_sent_total.inc(bytes_sent)
    if bytes_received:
        bytes_received_total.inc(bytes_received)
