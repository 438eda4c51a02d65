"""Client configuration.

Defaults match GlazeWM's IPC server. Auto-connect can be switched off from
the environment with GLAZEWM_DISABLE_AUTO_CONNECT=1 (or "true"), which is
useful for scripts and test runs that should never touch a live WM.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_PORT = 6123
DEFAULT_HOST = "localhost"
DEFAULT_TIMEOUT = 10.0

DISABLE_AUTO_CONNECT_ENV = "GLAZEWM_DISABLE_AUTO_CONNECT"


def auto_connect_disabled_by_env() -> bool:
    """Check whether the environment turns auto-connect off."""
    value = os.getenv(DISABLE_AUTO_CONNECT_ENV, "")
    return value.strip().lower() in ("1", "true")


@dataclass
class ClientOptions:
    """Options for a WmClient.

    Attributes:
        port: IPC server port
        host: IPC server host
        timeout: Seconds allowed for connecting, and separately for each request
        auto_connect: Connect on construction and before requests when dead
    """

    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    timeout: float = DEFAULT_TIMEOUT
    auto_connect: bool = True

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")
        if auto_connect_disabled_by_env():
            self.auto_connect = False

    @property
    def url(self) -> str:
        """WebSocket URL of the IPC server."""
        return f"ws://{self.host}:{self.port}"
