from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def setup_logging(
    *,
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    colors: str = "auto",
) -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    # console goes to stderr so command output stays pipeable
    console = Console(
        stderr=True,
        force_terminal=True if colors == "always" else None,
        no_color=colors == "never",
    )
    handlers: List[logging.Handler] = [
        RichHandler(console=console, rich_tracebacks=True, show_time=True, show_level=True, markup=True)
    ]
    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setLevel(lvl)
        file_handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
        handlers.append(file_handler)
    logging.basicConfig(level=lvl, handlers=handlers, force=True)
