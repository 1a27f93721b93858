"""Logging setup for the error tracker service."""
import logging
import json
import os
import sys
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "error_code"):
            log_entry["error_code"] = record.error_code
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = None, json_output: bool = None):
    """Configure the root logger from arguments, falling back to LOG_LEVEL / LOG_JSON."""
    level = level or os.getenv("LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes")

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
        ))

    root.handlers = [handler]

    # 시끄러운 로거 억제
    for name in ["uvicorn.access", "aiosqlite", "httpcore", "httpx"]:
        logging.getLogger(name).setLevel(logging.WARNING)
