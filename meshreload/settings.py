from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Reloader defaults (overridable on the command line)
    docker_socket: str = os.getenv("MESHRELOAD_DOCKER_SOCKET", "/var/run/docker.sock")
    wait_ms: int = _env_int("MESHRELOAD_WAIT_MS", 5000)
    signal: str = os.getenv("MESHRELOAD_SIGNAL", "SIGHUP")
    log_level: str = os.getenv("MESHRELOAD_LOG_LEVEL", "INFO")

    # Event journal (optional). Unset disables it.
    events_db: str | None = os.getenv("MESHRELOAD_EVENTS_DB")

    # Dtab CLI
    consul_addr: str = os.getenv("MESHRELOAD_CONSUL_ADDR", "http://localhost:8500")
    gateway_addr: str = os.getenv("MESHRELOAD_GATEWAY_ADDR", "http://localhost:3000")
    dtab_key: str = os.getenv("MESHRELOAD_DTAB_KEY", "namerd/dtabs/example")
    http_timeout_s: int = _env_int("MESHRELOAD_HTTP_TIMEOUT_S", 10)


settings = Settings()
