"""
End-to-end WebSocket tests.

This module runs the full application (lifespan, routing, endpoint,
router) through Starlette's TestClient and checks what real clients see.
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(app):
    """
    Create a test client with the application lifespan running.

    Args:
        app: FastAPI application fixture.

    Yields:
        TestClient: FastAPI test client instance.
    """
    with TestClient(app) as test_client:
        yield test_client


class TestLifecycle:
    """Test roster broadcasts on connect and disconnect."""

    def test_first_client_sees_itself(self, client):
        with client.websocket_connect("/") as ws:
            roster = ws.receive_json()

        assert roster["type"] == "client_list"
        assert roster["connection_number"] == 1
        assert roster["clients"] == [{"id": roster["current_client_id"]}]

    def test_existing_client_sees_join_and_leave(self, client):
        with client.websocket_connect("/") as a:
            a_id = a.receive_json()["current_client_id"]

            with client.websocket_connect("/") as b:
                b_roster = b.receive_json()
                b_id = b_roster["current_client_id"]
                joined = a.receive_json()

            left = a.receive_json()

        assert b_roster["connection_number"] == 2
        assert joined == b_roster
        assert {c["id"] for c in joined["clients"]} == {a_id, b_id}
        assert left == {
            "type": "client_list",
            "current_client_id": b_id,
            "clients": [{"id": a_id}],
            "connection_number": 1,
        }

    def test_reconnect_gets_new_id(self, client):
        with client.websocket_connect("/") as ws:
            first_id = ws.receive_json()["current_client_id"]
        with client.websocket_connect("/") as ws:
            second_id = ws.receive_json()["current_client_id"]

        assert first_id != second_id


class TestRelay:
    """Test unicast and broadcast relay between real connections."""

    def test_unicast(self, client):
        with client.websocket_connect("/") as a:
            a_id = a.receive_json()["current_client_id"]
            with client.websocket_connect("/") as b:
                b_id = b.receive_json()["current_client_id"]
                a.receive_json()

                a.send_json({"recipient": b_id, "data": "X"})

                assert b.receive_json() == {
                    "type": "signal",
                    "sender": a_id,
                    "message": {"recipient": b_id, "data": "X"},
                }

    def test_broadcast(self, client):
        with client.websocket_connect("/") as a:
            a.receive_json()
            with client.websocket_connect("/") as b:
                b_id = b.receive_json()["current_client_id"]
                a.receive_json()

                b.send_json({"candidate": "c1"})

                assert a.receive_json() == {
                    "type": "signal",
                    "sender": b_id,
                    "message": {"candidate": "c1"},
                }

    def test_binary_frames_are_relayed(self, client):
        with client.websocket_connect("/") as a:
            a.receive_json()
            with client.websocket_connect("/") as b:
                b.receive_json()
                a.receive_json()

                b.send_bytes(b'{"candidate": "c2"}')

                assert a.receive_json()["message"] == {"candidate": "c2"}

    def test_malformed_frame_keeps_connection_open(self, client):
        """Test a bad frame is dropped and later frames still relay."""
        with client.websocket_connect("/") as a:
            a.receive_json()
            with client.websocket_connect("/") as b:
                b.receive_json()
                a.receive_json()

                b.send_text("this is not json")
                b.send_text('{"recipient": 7}')
                b.send_text('{"data": NaN}')
                b.send_json({"candidate": "c3"})

                assert a.receive_json()["message"] == {"candidate": "c3"}

    def test_unknown_recipient_keeps_connection_open(self, client):
        with client.websocket_connect("/") as a:
            a.receive_json()
            with client.websocket_connect("/") as b:
                b.receive_json()
                a.receive_json()

                b.send_json({"recipient": "nonexistent", "data": "lost"})
                b.send_json({"data": "delivered"})

                assert a.receive_json()["message"] == {"data": "delivered"}


class TestHttpEndpoints:
    """Test health and metrics endpoints alongside live connections."""

    def test_health_reports_connected_clients(self, client):
        assert client.get("/health").json() == {
            "status": "healthy",
            "connected_clients": 0,
        }

        with client.websocket_connect("/") as ws:
            ws.receive_json()
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["connected_clients"] == 1

    def test_health_after_disconnect(self, client):
        with client.websocket_connect("/") as ws:
            ws.receive_json()

        assert client.get("/health").json()["connected_clients"] == 0

    def test_metrics_exposes_relay_counters(self, client):
        with client.websocket_connect("/") as ws:
            ws.receive_json()

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "ws_connections_active" in response.text
        assert "ws_messages_sent_total" in response.text
