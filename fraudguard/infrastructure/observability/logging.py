"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args, service: str = "fraudguard", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service


def setup_logging(level: str = "INFO", service: str = "fraudguard") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service=service,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_evaluation(
    request_id: str,
    scope: str,
    recommended: int,
    duration_ms: float,
    recipient: str | None = None,
) -> None:
    """Log structured evaluation outcome for analysis"""
    logging.info(
        "Recommendation evaluation completed",
        extra={
            "request_id": request_id,
            "scope": scope,
            "recipient": recipient,
            "step": "evaluation_complete",
            "recommended": recommended,
            "duration_ms": duration_ms,
        },
    )


def log_blacklist_change(request_id: str, action: str, outcome: str, recipient: str | None) -> None:
    logging.info(
        "Blacklist changed",
        extra={
            "request_id": request_id,
            "step": "blacklist_" + action,
            "outcome": outcome,
            "recipient": recipient,
        },
    )
