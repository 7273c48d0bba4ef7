"""
Command-line interface for the serial relay.

Provides commands for running the relay server, listing serial ports, and
querying a running server.
"""

import logging
import sys
from pathlib import Path

import click
import requests

from serialrelay import __version__
from serialrelay.core.config import Config, load_config
from serialrelay.serial.ports import COMMON_PORTS, list_ports, merge_ports


def _configure_logging(config: Config, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(version=__version__, prog_name="serialrelay")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "-c", "--config", "config_path", type=click.Path(exists=True, path_type=Path),
    help="Path to config file"
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """Serial Relay - Share a serial device with browser dashboards."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = load_config(config_path)


@main.command("serve")
@click.option("--host", help="Address to listen on")
@click.option("--port", "-p", type=int, help="Port to listen on")
@click.option("--serial-port", "-s", help="Serial port to open at startup")
@click.pass_context
def serve_cmd(
    ctx: click.Context,
    host: str | None,
    port: int | None,
    serial_port: str | None,
) -> None:
    """Run the relay server."""
    from serialrelay.web.app import create_app
    from serialrelay.web.websocket import get_hub

    config: Config = ctx.obj["config"]
    _configure_logging(config, ctx.obj.get("verbose", False))

    host = host or config.server.host
    port = port or config.server.port

    app = create_app(config)
    sio = app.extensions["socketio"]
    hub = get_hub(app)

    click.echo("=" * 60)
    click.echo("Serial Relay ready")
    click.echo(f"  Local:   http://localhost:{port}")
    click.echo(f"  Network: http://{host}:{port}")
    click.echo(f"  Baud:    {config.serial.baud_rate}")
    click.echo("=" * 60)

    if serial_port:
        hub.link.open(serial_port)

    try:
        sio.run(app, host=host, port=port, allow_unsafe_werkzeug=True)
    except KeyboardInterrupt:
        click.echo("\nShutting down server...")
    finally:
        hub.link.close()


@main.command("ports")
@click.option(
    "--all", "-a", "show_all", is_flag=True, help="Include common port names, not just detected ports"
)
@click.pass_context
def ports_cmd(ctx: click.Context, show_all: bool) -> None:
    """List available serial ports."""
    verbose = ctx.obj.get("verbose", False)
    detected = list_ports()
    ports = merge_ports(detected, COMMON_PORTS) if show_all else detected

    if not ports:
        click.echo("No serial ports detected")
        if verbose:
            click.echo("Use --all to show common port names")
        return

    detected_paths = {p.path for p in detected}

    click.echo(f"{'PORT':<20} {'DETECTED':<10} {'DESCRIPTION'}")
    click.echo("-" * 60)

    for port in ports:
        found = "yes" if port.path in detected_paths else "-"
        click.echo(f"{port.path:<20} {found:<10} {port.friendly_name or '-'}")

    if verbose:
        click.echo(f"\n{len(detected)} port(s) detected")


@main.command("status")
@click.option("--url", "-u", help="Relay server URL (default: local server)")
@click.option("--timeout", "-t", type=float, default=5.0, help="Request timeout in seconds")
@click.pass_context
def status_cmd(ctx: click.Context, url: str | None, timeout: float) -> None:
    """Show the link status of a running relay server."""
    config: Config = ctx.obj["config"]
    base_url = (url or f"http://localhost:{config.server.port}").rstrip("/")

    try:
        response = requests.get(f"{base_url}/api/status", timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        click.echo(f"Error: Could not reach relay at {base_url}: {e}", err=True)
        sys.exit(1)

    click.echo(f"Status:   {data.get('status', 'unknown')}")
    click.echo(f"Port:     {data.get('port') or '-'}")
    click.echo(f"Sessions: {data.get('sessions', 0)}")

    last_error = data.get("last_error")
    if last_error:
        detail = f" ({last_error['detail']})" if last_error.get("detail") else ""
        click.echo(f"Last error: {last_error.get('message')}{detail}")


if __name__ == "__main__":
    main()
