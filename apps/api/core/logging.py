"""
Structured logging configuration.

JSON lines in production (one object per record, request fields merged in
from `extra={"extra_fields": {...}}`), plain text for local development.
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from core.config import settings

SERVICE_NAME = "attune-api"

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "openai")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, tagged with service and environment."""

    def __init__(self, service: str = SERVICE_NAME, environment: Optional[str] = None):
        super().__init__()
        self.service = service
        self.environment = environment or settings.ENVIRONMENT

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service,
            "environment": self.environment,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_data.update(extra_fields)

        return json.dumps(log_data, default=str)


def _use_json() -> bool:
    return settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger once for the process.

    Replaces any existing root handlers with a single stdout handler so
    reloads under uvicorn don't double-log.
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    formatter = JSONFormatter() if _use_json() else logging.Formatter(TEXT_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
