"""
Logging setup for GERPAAS spec sync.

Two renderings of the same records:
  - JSON lines for the API service (one object per record)
  - plain text "HH:MM:SS [LEVEL] logger: message {run=.. element=..}", the
    layout operators read in the plug-in's Message.log

Sync and API code attach run_id / element_id / request_id / duration_ms via
`extra=`; both formatters pick them up when present.
"""
import logging
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

CONTEXT_FIELDS = ("run_id", "element_id", "request_id", "duration_ms")

# Libraries that log every statement or request at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx")


def record_context(record: logging.LogRecord) -> Dict[str, object]:
    context = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value not in (None, ""):
            context[name] = value
    return context


class JSONFormatter(logging.Formatter):
    def format(self, record):
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(record_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # Family names and descriptions are Cyrillic
        return json.dumps(entry, ensure_ascii=False, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain-text lines with the sync context appended in braces."""

    def __init__(self):
        super().__init__("%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record):
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        tail = " ".join(f"{k.replace('_id', '')}={v}" for k, v in context.items())
        # Tracebacks stay below the context
        head, sep, rest = line.partition("\n")
        return f"{head} {{{tail}}}{sep}{rest}"


def setup_logging(
    level: str = "INFO",
    json_output: bool = True,
    log_file: Optional[Union[str, Path]] = None,
) -> List[logging.Handler]:
    """
    Configure the root logger.

    Args:
        level: level name; unknown names fall back to INFO
        json_output: JSON lines on stdout when True, text lines otherwise
        log_file: optional path that also receives text lines (utf-8, appended)

    Returns:
        The installed handlers.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(JSONFormatter() if json_output else ContextTextFormatter())
    handlers: List[logging.Handler] = [console]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(ContextTextFormatter())
        handlers.append(file_handler)

    root.handlers = handlers

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handlers
