"""Tests for the command line interface."""

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from signaling_relay.cli import typer_app

runner = CliRunner()


@pytest.fixture
def mock_uvicorn():
    """
    Patch uvicorn in the CLI module.

    Yields:
        MagicMock: Mocked uvicorn module; `Server.return_value` is the server
    """
    with patch("signaling_relay.cli.uvicorn") as mock:
        mock.Server.return_value = MagicMock(started=True)
        yield mock


def test_config_lists_settings():
    result = runner.invoke(typer_app, ["config"])

    assert result.exit_code == 0
    assert "PORT" in result.output
    assert "8080" in result.output


def test_serve_uses_settings_by_default(mock_uvicorn):
    result = runner.invoke(typer_app, ["serve"])

    assert result.exit_code == 0
    _, kwargs = mock_uvicorn.Config.call_args
    assert kwargs["port"] == 8080
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["factory"] is True
    mock_uvicorn.Server.return_value.run.assert_called_once()


def test_serve_options_override_settings(mock_uvicorn):
    result = runner.invoke(
        typer_app, ["serve", "--host", "127.0.0.1", "--port", "9000"]
    )

    assert result.exit_code == 0
    _, kwargs = mock_uvicorn.Config.call_args
    assert kwargs["port"] == 9000
    assert kwargs["host"] == "127.0.0.1"


def test_serve_exits_non_zero_when_bind_fails(mock_uvicorn):
    """Test uvicorn's exit on bind failure becomes exit code 1."""
    mock_uvicorn.Server.return_value.run.side_effect = SystemExit(1)

    result = runner.invoke(typer_app, ["serve"])

    assert result.exit_code == 1
    assert "Failed to start server" in result.output


def test_serve_exits_non_zero_when_startup_fails(mock_uvicorn):
    mock_uvicorn.Server.return_value.started = False

    result = runner.invoke(typer_app, ["serve"])

    assert result.exit_code == 1


def test_serve_rejects_invalid_port(mock_uvicorn):
    result = runner.invoke(typer_app, ["serve", "--port", "70000"])

    assert result.exit_code != 0
    mock_uvicorn.Server.assert_not_called()


def test_serve_rejects_unknown_log_level(mock_uvicorn):
    result = runner.invoke(typer_app, ["serve", "--log-level", "loud"])

    assert result.exit_code != 0
    mock_uvicorn.Server.assert_not_called()
