"""Runtime settings read from the environment."""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass

from godeps.exceptions import ConfigError

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Process-wide settings; built once by the CLI and passed down explicitly.

    Environment variables:
        GODEPS_GO_COMMAND   - command used to invoke go (default: go)
        GODEPS_LOG_LEVEL    - log level (default: INFO)
        GODEPS_LOG_FORMAT   - console | json (default: console)
        GODEPS_HTTP_TIMEOUT - seconds for go-import discovery requests (default: 30)
        GODEPS_INSECURE     - allow plain http for go-import discovery (default: off)
    """

    go_command: tuple[str, ...] = ("go",)
    log_level: str = "INFO"
    log_format: str = "console"
    http_timeout: float = 30.0
    insecure: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        go_command = tuple(shlex.split(env.get("GODEPS_GO_COMMAND", "go")))
        if not go_command:
            raise ConfigError("GODEPS_GO_COMMAND must not be empty")

        log_format = env.get("GODEPS_LOG_FORMAT", "console").lower()
        if log_format not in ("console", "json"):
            raise ConfigError(f"GODEPS_LOG_FORMAT must be 'console' or 'json', got {log_format!r}")

        raw_timeout = env.get("GODEPS_HTTP_TIMEOUT", "30")
        try:
            http_timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigError(f"GODEPS_HTTP_TIMEOUT is not a number: {raw_timeout!r}") from e
        if http_timeout <= 0:
            raise ConfigError(f"GODEPS_HTTP_TIMEOUT must be positive, got {http_timeout}")

        return cls(
            go_command=go_command,
            log_level=env.get("GODEPS_LOG_LEVEL", "INFO").upper(),
            log_format=log_format,
            http_timeout=http_timeout,
            insecure=env.get("GODEPS_INSECURE", "").strip().lower() in _TRUE_VALUES,
        )
