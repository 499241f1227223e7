"""structlog setup for processes embedding beacon-health."""

import logging
import sys

import structlog

from .config.manager import ConfigManager


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Route structlog events through stdlib logging on stderr.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render one JSON object per line instead of console output.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging_from_config(manager: ConfigManager) -> None:
    """Apply the ``logging.level`` and ``logging.json`` settings of a loaded config."""
    configure_logging(
        level=manager.get("logging.level"),
        json_output=bool(manager.get("logging.json")),
    )
