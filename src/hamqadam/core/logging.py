"""Logging setup: packaged `logging.yaml`, with the level taken from `app.log_level`."""

from __future__ import annotations

import logging.config

from hamqadam.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Apply the logging config; `level` (e.g. from `--log-level`) beats settings."""
    level = (level or get_settings().app.log_level).upper()
    config = dict(get_logging_config())

    config["root"] = {**config.get("root", {}), "level": level}
    config["handlers"] = {
        name: {**handler, "level": level} if "level" in handler else handler
        for name, handler in config.get("handlers", {}).items()
    }
    logging.config.dictConfig(config)
