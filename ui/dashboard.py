"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.request_types import CacheKind, ContentCategory, NoProbe, ProbeResult
from ui.log_utils import shorten, write_cli_log

console = Console()

STRATEGY_STYLES = {
    "render": "blue",
    "structured": "green",
    "stream": "magenta",
    "cache": "cyan",
}


class RequestInfo:
    """Info about a single proxied request."""

    def __init__(self, url: str, category: str, strategy: str, timestamp: datetime):
        self.url = shorten(url, 80)
        self.category = category
        self.strategy = strategy
        self.timestamp = timestamp


class Dashboard:
    """Live dashboard of recent requests, per-strategy counts and errors.

    Every event is also appended to the CLI log. Without ``start()`` the
    dashboard only writes the log, which is what ``--no-dashboard`` uses.
    """

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[RequestInfo] = []
        self._max_recent = 10
        self._counts = {"render": 0, "structured": 0, "stream": 0, "cache": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_invalid(self, message: str) -> None:
        write_cli_log("WARN", message)

    def log_cache_hit(self, url: str, kind: CacheKind) -> None:
        with self._lock:
            self._record(url, CacheKind(kind).value, "cache")
            write_cli_log("INFO", f"CACHE HIT: {url}")
            self._refresh()

    def log_probe(self, url: str, probe: ProbeResult) -> None:
        if isinstance(probe, NoProbe):
            write_cli_log("INFO", f"HEAD failed for {url} - falling back to URL patterns: {probe.reason}")

    def log_dispatch(self, url: str, category: ContentCategory, strategy: str) -> None:
        """Log the strategy chosen for a cache miss."""
        with self._lock:
            self._record(url, ContentCategory(category).value, strategy)
            write_cli_log("INFO", f"Dispatching {url}", category=ContentCategory(category).value, strategy=strategy)
            self._refresh()

    def log_complete(self, url: str, strategy: str, detail: str = "") -> None:
        message = f"{strategy} complete for {url}"
        if detail:
            message += f" ({detail})"
        write_cli_log("INFO", message)

    def log_error(self, url: str, error: BaseException) -> None:
        """Log a failed request or a broken stream."""
        with self._lock:
            name = type(error).__name__
            self._errors.insert(0, f"{name}: {shorten(str(error), 50)} [{shorten(url, 40)}]")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", f"Proxy error for {url}: {error}", error=name)

    def _record(self, url: str, category: str, strategy: str) -> None:
        self._counts[strategy] = self._counts.get(strategy, 0) + 1
        self._recent.insert(0, RequestInfo(url, category, strategy, datetime.now()))
        self._recent = self._recent[: self._max_recent]

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("ProxyMagic", style="bold cyan")
        for strategy, count in self._counts.items():
            stats.append("  |  ")
            stats.append(f"{strategy}: {count}", style=STRATEGY_STYLES.get(strategy, ""))
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Strategy", width=10)
            table.add_column("Category", width=8)
            table.add_column("URL", ratio=1)

            for req in self._recent:
                style = STRATEGY_STYLES.get(req.strategy, "")
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    Text(req.strategy, style=style),
                    req.category,
                    req.url,
                )
            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent requests[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Open http://{self.config.proxy.host}:{self.config.proxy.port}/proxy?url=<target>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
