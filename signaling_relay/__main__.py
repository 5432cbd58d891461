from signaling_relay.cli import typer_app

typer_app()
