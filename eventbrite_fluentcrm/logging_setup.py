"""Process logging configuration."""

from __future__ import annotations

import logging

LOG_PREFIX = "[Eventbrite FluentCRM]"

_HANDLER_NAME = "eventbrite_fluentcrm"


def configure_logging(debug: bool = False) -> None:
    """Install a single stream handler on the package logger."""
    package_logger = logging.getLogger("eventbrite_fluentcrm")
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    for handler in package_logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(
        f"%(asctime)s %(levelname)s {LOG_PREFIX} %(name)s: %(message)s",
    ))
    package_logger.addHandler(handler)
