"""Shared logging utilities."""

from collections import deque
from datetime import UTC, datetime
from pathlib import Path
from threading import Lock
from typing import Any

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"

_write_lock = Lock()


def write_cli_log(
    level: str,
    message: str,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    CLI_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    # One event per line
    line = line.replace("\n", " ") + "\n"
    with _write_lock, CLI_LOG_FILE.open("a") as f:
        f.write(line)


def read_log_tail(limit: int = 200) -> list[str]:
    """Return the last ``limit`` lines of the CLI log (oldest first)."""
    if limit <= 0 or not CLI_LOG_FILE.exists():
        return []
    with CLI_LOG_FILE.open(encoding="utf-8", errors="replace") as f:
        return [line.rstrip("\n") for line in deque(f, maxlen=limit)]


def clear_logs() -> None:
    """Truncate the CLI log at startup."""
    with _write_lock:
        if CLI_LOG_FILE.exists():
            CLI_LOG_FILE.write_text("")


def shorten(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text
