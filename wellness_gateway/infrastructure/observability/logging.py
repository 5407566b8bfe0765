"""Structured JSON logging for computation requests and collaborator data quality"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from wellness_gateway.config import settings

# httpx logs every request line at INFO
NOISY_LOGGERS = ["httpx", "httpcore"]


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping UTC time, level and the service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to stdout as JSON, replacing existing handlers"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_analysis(
    request_id: str,
    user_id: str,
    kind: str,
    duration_ms: float,
    **outcome: Any,
) -> None:
    """Log structured outcome of one computation request (summary, fees, health, ...)"""
    logging.info(
        "Analysis completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": f"{kind}_complete",
            "analysis_kind": kind,
            "duration_ms": duration_ms,
            **outcome,
        },
    )


def log_malformed_record(entity: str, index: int, action: str, **details: Any) -> None:
    """Warn about one collaborator record that was skipped or coerced during parsing"""
    logging.getLogger("wellness_gateway.records").warning(
        f"Malformed {entity} record {action}",
        extra={"entity": entity, "record_index": index, "action": action, **details},
    )
