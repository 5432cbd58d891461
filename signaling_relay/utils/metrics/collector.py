"""
Facade for centralized metrics emission.

Provides high-level methods for recording metrics without exposing
Prometheus implementation details to the rest of the codebase.
"""

from signaling_relay.utils.metrics.websocket import (
    ws_connections_active,
    ws_connections_total,
    ws_messages_dropped_total,
    ws_messages_received_total,
    ws_messages_sent_total,
    ws_send_failures_total,
)


class MetricsCollector:
    """
    Centralized facade for relay metrics.

    All methods are static for easy use without instantiation.
    """

    @staticmethod
    def record_ws_connection_accepted() -> None:
        """Record successful WebSocket connection."""
        ws_connections_total.inc()
        ws_connections_active.inc()

    @staticmethod
    def record_ws_disconnection() -> None:
        """Record WebSocket disconnection."""
        ws_connections_active.dec()

    @staticmethod
    def record_ws_message_received() -> None:
        """Record WebSocket message received."""
        ws_messages_received_total.inc()

    @staticmethod
    def record_ws_message_dropped(reason: str) -> None:
        """
        Record an inbound message that was not relayed.

        Args:
            reason: One of 'malformed', 'unknown_recipient'
        """
        ws_messages_dropped_total.labels(reason=reason).inc()

    @staticmethod
    def record_ws_delivery(envelope_type: str, delivered: int, failed: int) -> None:
        """
        Record the outcome of one fan-out.

        Args:
            envelope_type: 'client_list' or 'signal'
            delivered: Number of successful sends
            failed: Number of failed sends
        """
        if delivered:
            ws_messages_sent_total.labels(type=envelope_type).inc(delivered)
        if failed:
            ws_send_failures_total.labels(type=envelope_type).inc(failed)
