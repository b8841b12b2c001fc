import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from app.core.config import settings

# Attributes copied from `extra={...}` into the JSON line, grouped by concern
REQUEST_FIELDS = ("request_id", "method", "path", "status_code", "latency_ms")
RECORD_FIELDS = ("payment_id", "review_id", "reference", "package_type", "rating")
VERIFICATION_FIELDS = ("policy", "amount", "expected_amount")
UPSTREAM_FIELDS = ("provider", "model", "upstream_status")
MISC_FIELDS = ("error", "before", "after")

# Libraries whose INFO output duplicates our own request/upstream logs
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "uvicorn.access")


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, event message, env and whitelisted extras."""

    EXTRA_FIELDS = REQUEST_FIELDS + RECORD_FIELDS + VERIFICATION_FIELDS + UPSTREAM_FIELDS + MISC_FIELDS

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "env": settings.app_env,
        }
        payload.update(
            (field, getattr(record, field))
            for field in self.EXTRA_FIELDS
            if getattr(record, field, None) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # ensure_ascii=False: Thai text stays readable in the log
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging() -> None:
    """Route the root logger through JsonFormatter (stderr, plus a rotating file when LOG_FILE is set)."""
    formatter = JsonFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(
            RotatingFileHandler(
                settings.log_file,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = handlers
    root.setLevel(settings.log_level.upper())
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
