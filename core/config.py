"""Configuration models and loading."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from core.exceptions import ConfigurationError

CONFIG_DIR = Path.home() / ".config" / "proxy-magic"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3002


class CacheSettings(BaseModel):
    ttl: float = 300.0


class TimeoutSettings(BaseModel):
    """Upstream deadlines, in seconds."""

    probe: float = 15.0
    fetch: float = 30.0
    stream: float = 120.0
    max_redirects: int = 5


class RenderSettings(BaseModel):
    executable_path: str | None = None
    headless: bool = True
    navigation_timeout: float = 120.0
    settle_delay: float = 4.0
    network_idle_timeout: float = 20.0


class LimitSettings(BaseModel):
    rate_limit_enabled: bool = True
    requests_per_minute: int = 60
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5


class RoutingSettings(BaseModel):
    # /api/ and .json URLs go to the structured fetch whatever the probe said
    json_url_priority: bool = True


class LoggingSettings(BaseModel):
    tail_lines: int = 200


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_config() -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        default = Config()
        CONFIG_FILE.write_text(default.model_dump_json(indent=2))
        return apply_env_overrides(default)

    try:
        data = json.loads(CONFIG_FILE.read_text())
        config = Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = CONFIG_FILE.with_suffix(".json.bak")
        CONFIG_FILE.rename(backup)
        config = Config()
        CONFIG_FILE.write_text(config.model_dump_json(indent=2))
    return apply_env_overrides(config)


def apply_env_overrides(config: Config, environ: dict[str, str] | None = None) -> Config:
    """Apply PORT and CHROME_PATH from the environment."""
    env = os.environ if environ is None else environ
    config = config.model_copy(deep=True)
    if env.get("PORT"):
        try:
            config.proxy.port = int(env["PORT"])
        except ValueError as e:
            raise ConfigurationError(f"PORT must be an integer, got {env['PORT']!r}") from e
    if env.get("CHROME_PATH"):
        config.render.executable_path = env["CHROME_PATH"]
    return config
