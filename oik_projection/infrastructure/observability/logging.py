"""JSON log formatting and the per-projection outcome line"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from oik_projection.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Adds UTC timestamp, level name and service to each record"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Route every log record to stdout as one JSON object per line"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)


def log_projection(
    request_id: str,
    family_id: str,
    months: int,
    alert_level: str | None,
    income_source: str | None,
    narrative_source: str | None,
    duration_ms: float,
) -> None:
    """One line per served projection, keyed by request and family"""
    logging.info(
        "Projection completed",
        extra={
            "request_id": request_id,
            "family_id": family_id,
            "step": "projection_complete",
            "months": months,
            "alert_level": alert_level,
            "income_source": income_source,
            "narrative_source": narrative_source,
            "duration_ms": duration_ms,
        },
    )
