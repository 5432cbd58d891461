"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the client registry, the
signaling router and the FastAPI application.
"""

import pytest

from signaling_relay.managers.client_registry import ClientRegistry
from signaling_relay.managers.signaling_router import SignalingRouter


@pytest.fixture
def registry():
    """
    Provides an empty ClientRegistry.

    Returns:
        ClientRegistry: Fresh registry instance
    """
    return ClientRegistry()


@pytest.fixture
def router(registry):
    """
    Provides a SignalingRouter owning the `registry` fixture.

    A short send timeout keeps stalled-connection tests fast.

    Args:
        registry: Fixture providing the registry

    Returns:
        SignalingRouter: Router instance
    """
    return SignalingRouter(registry=registry, send_timeout=0.2)


@pytest.fixture
def app():
    """
    Create the FastAPI application.

    Returns:
        FastAPI: Application instance (lifespan runs inside TestClient)
    """
    from signaling_relay import application

    return application()
