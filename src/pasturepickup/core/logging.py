"""
Logging setup shared by the API and the CLI.

The packaged `config/logging.yaml` defines handlers and formatters; the level comes
from `app.log_level` (`PASTUREPICKUP_LOG_LEVEL`) unless the caller passes one, as the
CLI does for `--log-level` and for quiet `--json` runs.
"""

from __future__ import annotations

import copy
import logging
import logging.config

from pasturepickup.config.settings import get_logging_config, get_settings

# Third-party loggers that stay at or above this level unless DEBUG is asked for.
_NOISY_LOGGERS = ("httpx", "httpcore")


def resolve_level(level: str | None = None) -> str:
    """Return a validated upper-case level name (`level` or the configured one)."""
    name = (level or get_settings().app.log_level).strip().upper()
    if not isinstance(logging.getLevelName(name), int):
        raise ValueError(f"Unknown log level: {level or name!r}")
    return name


def configure_logging(level: str | None = None) -> str:
    """Apply the packaged logging config at `level`; returns the level used."""
    name = resolve_level(level)
    # get_logging_config() is cached; never mutate the shared dict.
    config = copy.deepcopy(get_logging_config())

    config.setdefault("root", {})["level"] = name
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict):
            handler["level"] = name

    loggers = config.setdefault("loggers", {})
    for logger_name in _NOISY_LOGGERS:
        entry = loggers.setdefault(logger_name, {"propagate": True})
        if name == "DEBUG":
            entry["level"] = name
        else:
            entry.setdefault("level", "WARNING")

    logging.config.dictConfig(config)
    return name
