"""Structured logging configuration for s3agent.

The agent emits one DEBUG record per round trip through the
``s3agent.agent`` logger. The request details ride along as record
attributes, which :class:`JSONFormatter` copies into its output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TextIO

# Round-trip attributes set by StorageAgent through ``extra=``.
ROUND_TRIP_FIELDS = ("operation", "method", "bucket", "key", "status", "duration_ms")

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects.

    Fields: timestamp, level, logger, message, plus whichever round-trip
    fields the record carries.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(
            (name, getattr(record, name))
            for name in ROUND_TRIP_FIELDS
            if getattr(record, name, None) is not None
        )
        return json.dumps(entry, default=str)


def _formatter_for(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(
    level: str = "INFO",
    fmt: str = "text",
    stream: TextIO | None = None,
) -> None:
    """Configure root logging with the specified level and format.

    Intended for applications embedding the agent. The library itself only
    emits records through module loggers; ``StorageAgent.from_config``
    calls this when asked to apply the ``logging`` config section.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        fmt: 'text' for human-readable lines, 'json' for structured output.
        stream: Where records are written. Defaults to stderr.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    root = logging.getLogger()
    root.setLevel(numeric_level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(_formatter_for(fmt))
    root.addHandler(handler)
