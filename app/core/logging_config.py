"""Logging setup driven by the application settings."""

import json
import logging
import sys
from datetime import datetime, timezone

from app.core.config import LogFormatEnum, Settings

SIMPLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(config: Settings) -> None:
    """Install a single stream handler on the root logger.

    Calling it again replaces the handler instead of stacking a second one.
    """
    handler = logging.StreamHandler(sys.stdout)
    if config.log_format == LogFormatEnum.json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_planora", False):
            root.removeHandler(existing)
    handler._planora = True
    root.addHandler(handler)
    root.setLevel(config.log_level.value)

    # SQL echo is controlled by the engine, keep its logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if config.debug else logging.WARNING
    )
