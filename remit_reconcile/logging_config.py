"""
Logging setup for the reconcile CLI.

JSON output carries the event name and its fields (see ``events.LoggingSink``)
so a run can be inspected by log tooling; plain output is for terminals.
"""

from __future__ import annotations

import logging
import sys

from pythonjsonlogger.json import JsonFormatter


class EventJsonFormatter(JsonFormatter):
    """JSON formatter that always emits timestamp, level and logger name."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["name"] = record.name
        if "message" not in log_record:
            log_record["message"] = record.getMessage()


def setup_logging(level: int = logging.INFO, format_as_json: bool = False) -> None:
    """Configure the root logger with a single stdout handler."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if format_as_json:
        formatter: logging.Formatter = EventJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
