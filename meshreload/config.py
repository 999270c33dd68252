from __future__ import annotations

import argparse
import socket

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigInvalid
from .settings import settings


class ReloadConfig(BaseModel):
    reload: str = Field(..., min_length=1, description="ECS container name of the process to signal")
    file_to_watch: str = Field(..., min_length=1, description="File whose changes trigger the signal")
    wait_time: int = Field(5000, ge=0, description="Milliseconds to wait before looking up the target")
    docker_socket: str = Field("/var/run/docker.sock", min_length=1)
    hostname: str = Field(default_factory=socket.gethostname, description="Id of this container")
    signal: str = Field("SIGHUP", min_length=1)
    retries: int = Field(0, ge=0, le=100, description="Extra target lookups after the first one fails")
    retry_delay: int = Field(2000, ge=0, description="Milliseconds between target lookups")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="meshreload",
        description="Signal a sibling ECS container whenever a file changes.",
    )
    p.add_argument("-w", "--watch", metavar="FILE", help="File to watch")
    p.add_argument("-r", "--reload", metavar="CONTAINER", help="ECS container to reload")
    p.add_argument(
        "-t",
        "--wait",
        metavar="MS",
        default=settings.wait_ms,
        help=f"Wait a number of milliseconds before resolving the target; default {settings.wait_ms}ms",
    )
    p.add_argument(
        "-d",
        "--docker",
        metavar="SOCKET",
        default=settings.docker_socket,
        help=f"Path to the Docker socket, default {settings.docker_socket}",
    )
    p.add_argument("-s", "--signal", default=settings.signal, help=f"Signal to send, default {settings.signal}")
    p.add_argument("--retries", default=0, help="Retry the target lookup this many times (default 0: fail fast)")
    p.add_argument("--retry-delay", metavar="MS", default=2000, help="Milliseconds between lookups, default 2000")
    return p


def parse_config(argv: list[str] | None = None) -> ReloadConfig:
    """Parse command line arguments into a validated config.

    A new parser is built on every call.
    """
    args = build_parser().parse_args(argv)

    if not args.reload:
        raise ConfigInvalid("--reload property is required.")
    if not args.watch:
        raise ConfigInvalid("--watch property is required.")

    try:
        return ReloadConfig(
            reload=args.reload,
            file_to_watch=args.watch,
            wait_time=args.wait,
            docker_socket=args.docker,
            signal=args.signal,
            retries=args.retries,
            retry_delay=args.retry_delay,
        )
    except ValidationError as e:
        raise ConfigInvalid(str(e)) from e
