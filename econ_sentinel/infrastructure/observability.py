"""Structured Logging — JSON log lines carrying the ledger and rule context.

Invariants:
    - Every line has timestamp (from the record, UTC), level, logger and message
    - Ledger/rule extras (user_id, rule, signature, nonce, lock_key…) appear only when set
    - setup_logging replaces root handlers, so calling it twice never duplicates lines

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - SQLAlchemy engine chatter is capped at WARNING regardless of log_level
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "user_id", "rule", "severity", "error_code", "action_name", "path",
    "kind", "delta", "source", "signature", "nonce", "lock_key",
)


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update({
            key: record.__dict__[key] for key in EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json"
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"),
    )
    logging.root.handlers = [handler]
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
