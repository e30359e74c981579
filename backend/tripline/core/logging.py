from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict

from tripline.core.settings import settings

# attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class ContextFormatter(logging.Formatter):
    """Standard line format followed by the ``extra`` context as key=value."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_FIELDS and not key.startswith("_")
        }
        if not context:
            return line
        rendered = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{line} | {rendered}"


def _build_logging_config(log_dir: Path) -> Dict[str, Any]:
    formatter = {
        "()": ContextFormatter,
        "fmt": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    }
    handler_defaults = {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "context",
        "maxBytes": settings.log_max_bytes,
        "backupCount": settings.log_backup_count,
        "encoding": "utf-8",
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"context": formatter},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": "context",
            },
            "timeline_file": {
                **handler_defaults,
                "level": settings.log_level,
                "filename": str(log_dir / "tripline.log"),
            },
            "error_file": {
                **handler_defaults,
                "level": "ERROR",
                "filename": str(log_dir / "errors.log"),
            },
        },
        "loggers": {
            "tripline": {"level": settings.log_level, "propagate": True},
        },
        "root": {
            "level": settings.log_level,
            "handlers": ["console", "timeline_file", "error_file"],
        },
    }


def setup_logging() -> None:
    """Configure logging once at application start."""

    log_dir = Path(settings.log_directory).resolve()
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(_build_logging_config(log_dir))


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``tripline`` namespace."""

    if name and not name.startswith("tripline"):
        name = f"tripline.{name}"
    return logging.getLogger(name or "tripline")
