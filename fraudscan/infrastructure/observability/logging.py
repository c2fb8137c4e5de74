"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "fraudscan"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_features_computed(
    request_id: str,
    session_id: str,
    row_count: int,
    record_count: int,
    candidate_count: int,
    duration_ms: float,
) -> None:
    """Log structured feature pass outcome"""
    logging.info(
        "Features computed",
        extra={
            "request_id": request_id,
            "session_id": session_id,
            "step": "features_complete",
            "row_count": row_count,
            "record_count": record_count,
            "skipped_rows": row_count - record_count,
            "candidate_count": candidate_count,
            "duration_ms": duration_ms,
        },
    )


def log_scoring_complete(
    request_id: str,
    session_id: str,
    submitted: int,
    scored: int,
    duration_ms: float,
) -> None:
    """Log structured scorer outcome"""
    logging.info(
        "Scoring completed",
        extra={
            "request_id": request_id,
            "session_id": session_id,
            "step": "scoring_complete",
            "submitted_count": submitted,
            "scored_count": scored,
            "duration_ms": duration_ms,
        },
    )
