"""
Prometheus metrics for WebSocket connection monitoring.

This module defines metrics for tracking relay connections, inbound
messages, outbound envelopes, drops and failed sends.
"""

from typing import TypeVar

from prometheus_client import REGISTRY, Counter, Gauge

MetricT = TypeVar("MetricT", Counter, Gauge)


def _metric(
    metric_cls: type[MetricT], name: str, doc: str, *labels: str
) -> MetricT:
    # Reuse the collector already in the default registry when this module
    # is imported again (uvicorn --reload, test re-imports)
    try:
        return metric_cls(name, doc, labels)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


# WebSocket Connection Metrics
ws_connections_active = _metric(
    Gauge, "ws_connections_active", "Number of active WebSocket connections"
)

ws_connections_total = _metric(
    Counter, "ws_connections_total", "Total WebSocket connections accepted"
)

# Message Metrics
ws_messages_received_total = _metric(
    Counter, "ws_messages_received_total", "Total WebSocket messages received"
)

ws_messages_sent_total = _metric(
    Counter,
    "ws_messages_sent_total",
    "Total envelopes delivered to clients",
    "type",  # client_list, signal
)

ws_messages_dropped_total = _metric(
    Counter,
    "ws_messages_dropped_total",
    "Total inbound messages dropped without relay",
    "reason",  # malformed, unknown_recipient
)

ws_send_failures_total = _metric(
    Counter,
    "ws_send_failures_total",
    "Total failed sends to individual clients",
    "type",  # client_list, signal
)


__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_messages_dropped_total",
    "ws_send_failures_total",
]
