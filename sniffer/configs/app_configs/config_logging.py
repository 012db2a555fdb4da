"""Logging configuration"""

import logging
from logging.config import dictConfig
from typing import Any

from dockerflow import logging as dockerflow_logging
from rich.console import Console

from sniffer.configs import settings

# stdout carries the descriptor JSON printed by the CLI, so logs go to stderr.
LOG_STREAM = "ext://sys.stderr"


def _handler(log_format: str) -> tuple[str, dict[str, Any]]:
    """Return the name and dictConfig entry of the handler for `log_format`."""
    match log_format:
        case "mozlog":
            return "console-mozlog", {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": LOG_STREAM,
            }
        case "pretty":
            return "console-pretty", {
                "class": "rich.logging.RichHandler",
                "formatter": "text",
                "console": Console(stderr=True),
            }
        case _:
            raise ValueError(
                f"Invalid log format: {log_format}. Should either be 'mozlog' or 'pretty'."
            )


def configure_logging() -> None:
    """Configure the `sniffer` logger with MozLog or rich console output."""
    name, handler = _handler(settings.logging.format)

    if settings.current_env.lower() == "production" and name != "console-mozlog":
        raise ValueError("Log format must be 'mozlog' in production")

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "text": {"format": "%(message)s"},
                "json": {"()": GCPCompatibleJSONFormatter, "logger_name": "sniffer"},
            },
            "handlers": {name: handler | {"level": settings.logging.level}},
            "loggers": {
                "sniffer": {
                    "handlers": [name],
                    "level": settings.logging.level,
                    "propagate": settings.logging.can_propagate,
                },
            },
        }
    )


class GCPCompatibleJSONFormatter(dockerflow_logging.JsonLogFormatter):
    """MozLog JSON with the numeric `severity` field GCP log ingestion reads."""

    SEVERITIES = {
        logging.CRITICAL: 600,
        logging.ERROR: 500,
        logging.WARNING: 400,
        logging.INFO: 200,
        logging.DEBUG: 100,
    }

    def convert_record(self, record: logging.LogRecord) -> dict[str, Any]:
        """Add `severity` next to MozLog's own `Severity`."""
        out = super().convert_record(record)
        out["severity"] = self.SEVERITIES.get(record.levelno, 0)
        return out
