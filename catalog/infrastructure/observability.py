"""Catalog Logging — one JSON object per line, tagged with the catalog record it touched.

Invariants:
    - Every line carries timestamp, level, logger, message and the service name
    - CATALOG_LOG_KEYS are copied from `extra=` only when set; ids and dates are
      rendered as strings, never dropped
    - Driver chatter (sqlalchemy.engine, aiosqlite, asyncpg) is capped at WARNING

Design Decisions:
    - Plain logging.Formatter subclass, configured once from the app lifespan
    - "text" format keeps local runs and pytest output readable
"""

import logging
import json
from datetime import datetime, timezone

SERVICE_NAME = "library-catalog"

CATALOG_LOG_KEYS = (
    "operation", "entity_kind", "entity_id", "state",
    "lookup", "error_code", "path",
)

_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncpg")


class JSONFormatter(logging.Formatter):
    """Render a record and its catalog extras as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update({
            key: record.__dict__[key]
            for key in CATALOG_LOG_KEYS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Attach the catalog handler to the root logger."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
