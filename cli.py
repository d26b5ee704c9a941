"""CLI entry point for proxy-magic."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, load_config
from core.exceptions import ConfigurationError
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    live_dashboard = True

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(f"[bold]Log:[/bold] {CLI_LOG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg == "--no-dashboard":
            live_dashboard = False

    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    # Clear previous logs and start dashboard
    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if live_dashboard:
        dashboard.start()
    else:
        console.print(f"Proxy server running on http://{config.proxy.host}:{config.proxy.port}")
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]ProxyMagic[/bold cyan]

Adaptive reverse proxy: renders HTML pages in headless Chromium, fetches JSON
APIs (wrapping embedded stream links in a player), and streams media with
Range support.

[bold]Usage:[/bold]
    proxy-magic                  Start with live dashboard
    proxy-magic --no-dashboard   Start without the live dashboard
    proxy-magic --config         Show config and log locations
    proxy-magic --help           Show this help

[bold]Endpoints:[/bold]
    GET /proxy?url=<target>      Proxy a target URL
    GET /admin                   Cache keys and recent log lines

[bold]Environment:[/bold]
    PORT          Override proxy.port
    CHROME_PATH   Chromium executable used for rendering
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
