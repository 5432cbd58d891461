"""
Prometheus metrics definitions and utilities.

Metrics are re-exported here so callers can import from one place:

    from signaling_relay.utils.metrics import ws_connections_active

New code should use the MetricsCollector facade:

    from signaling_relay.utils.metrics import MetricsCollector
    MetricsCollector.record_ws_message_received()
"""

from signaling_relay.utils.metrics.collector import MetricsCollector
from signaling_relay.utils.metrics.websocket import (
    ws_connections_active,
    ws_connections_total,
    ws_messages_dropped_total,
    ws_messages_received_total,
    ws_messages_sent_total,
    ws_send_failures_total,
)

__all__ = [
    "MetricsCollector",
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_dropped_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_send_failures_total",
]
