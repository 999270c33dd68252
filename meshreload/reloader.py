from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Callable

from docker.errors import DockerException
from requests import RequestException

from . import events
from .config import ReloadConfig, parse_config
from .docker_ops import docker_client, resolve_target
from .errors import ReloadError
from .settings import settings
from .watcher import WatchSession, signal_on_file_change

logger = logging.getLogger(__name__)

# Failures worth another target lookup: our own checks, API errors, and
# connection errors the docker SDK passes through unwrapped.
RETRYABLE = (ReloadError, DockerException, RequestException)


class Phase(str, Enum):
    CONFIG_LOADED = "config_loaded"
    RUNTIME_READY = "runtime_ready"
    DELAYED = "delayed"
    TARGET_RESOLVED = "target_resolved"
    WATCHING = "watching"


class Reloader:
    """Finds the target container and starts watching the file.

    Built from a loaded config; phases run strictly in order and any
    failure before WATCHING propagates.
    """

    def __init__(
        self,
        config: ReloadConfig,
        client_factory: Callable[[str], Any] | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        self.config = config
        self.client_factory = client_factory or docker_client
        self.sleep = sleep or time.sleep
        self.phase = Phase.CONFIG_LOADED
        self.client: Any = None
        self.target: Any = None
        self.session: WatchSession | None = None

    def start(self) -> WatchSession:
        self.client = self.client_factory(self.config.docker_socket)
        self.phase = Phase.RUNTIME_READY

        if self.config.wait_time > 0:
            events.log_event("INFO", f"Waiting {self.config.wait_time}ms for task containers to start", log=logger)
            self.sleep(self.config.wait_time / 1000.0)
        self.phase = Phase.DELAYED

        self.target = self._resolve_target()
        self.phase = Phase.TARGET_RESOLVED

        self.session = signal_on_file_change(self.target, self.config.file_to_watch, signal=self.config.signal)
        self.phase = Phase.WATCHING
        return self.session

    def _resolve_target(self) -> Any:
        attempts = self.config.retries + 1
        attempt = 1
        while True:
            try:
                return resolve_target(self.client, self.config.hostname, self.config.reload)
            except RETRYABLE as e:
                if attempt >= attempts:
                    raise
                events.log_event(
                    "WARN",
                    f"Target lookup failed (attempt {attempt}/{attempts}): {e}; retrying in {self.config.retry_delay}ms",
                    log=logger,
                )
                self.sleep(self.config.retry_delay / 1000.0)
                attempt += 1

    def stop(self) -> None:
        if self.session is not None:
            self.session.close()


def main(argv: list[str] | None = None) -> int:
    events.setup_logging(settings.log_level)
    reloader: Reloader | None = None
    try:
        events.init_db()
        config = parse_config(argv)
        reloader = Reloader(config)
        session = reloader.start()
        session.wait()
        return 0
    except KeyboardInterrupt:
        events.log_event("INFO", "Interrupted; stopping watch", log=logger)
        return 0
    except RETRYABLE as e:
        events.log_event("ERROR", f"{type(e).__name__}: {e}", log=logger)
        return 1
    except Exception as e:
        logger.exception("Unexpected error during startup")
        events.log_event("ERROR", f"{type(e).__name__}: {e}", log=logger)
        return 1
    finally:
        if reloader is not None:
            reloader.stop()
