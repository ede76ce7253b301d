"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from credit_dashboard.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


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


def token_suffix(access_token: Optional[str]) -> str:
    """Last 4 characters of an access token, safe to log"""
    if not access_token:
        return ""
    return f"...{access_token[-4:]}"


def log_account_event(
    request_id: str,
    user_id: str,
    event: str,
    account_id: Optional[str] = None,
    **fields: Any,
) -> None:
    """Log a structured account lifecycle event"""
    logging.info(
        "Account event",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": event,
            "account_id": account_id,
            **fields,
        },
    )
