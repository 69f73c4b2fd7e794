from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from questboard.infra.settings import Settings, load_settings

_CONFIGURED = False

# attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_FIELDS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Serialize log records as structured JSON."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_FIELDS:
                data[key] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            data["stack_info"] = record.stack_info
        return json.dumps(data, ensure_ascii=False, default=str)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging handlers once for the service."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = settings or load_settings()
    log_dir = Path(settings.log_dir) if settings.log_dir else Path.cwd() / "logs"
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logging.getLogger(__name__).warning(
            "Unable to create log directory %s: %s", log_dir, exc
        )
    else:
        handlers.append(
            logging.FileHandler(log_dir / "questboard.log", mode="a", encoding="utf-8")
        )

    if settings.log_format == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        handlers=handlers,
        force=True,
    )

    _CONFIGURED = True


__all__ = ["JsonFormatter", "configure_logging"]
