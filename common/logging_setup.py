from __future__ import annotations

import logging
import os
import sys
import json
import time
from typing import Optional


_CONFIGURED_FLAG = "_modraw_configured"


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record, e.g. a per-file replay summary:
      { "t": 1700000000123, "lvl": "INFO", "name": "playback.scheduler",
        "msg": "File replay finished", "extra": {"source": "01.modraw", "packets": 2} }

    Structured fields go through `extra={"extra": {...}}`; packet dates and
    paths are rendered with str().
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            payload["extra"] = fields
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: Optional[str] = None, *, force: bool = False) -> None:
    """
    Send every logger to stdout as JSON.

    Level comes from `level`, else LOG_LEVEL, else INFO; unknown names fall
    back to INFO. Modules trigger this on import through get_logger(), so
    the first call wins unless force=True (the CLI re-applies the level from
    --log-level or the config file that way).
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG, False) and not force:
        return

    lvl_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    lvl = getattr(logging, lvl_name, None)
    if not isinstance(lvl, int):
        lvl = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(lvl)
    setattr(root, _CONFIGURED_FLAG, True)


def get_logger(name: str) -> logging.Logger:
    """Module logger (`modraw.*` / `playback.*`) on the JSON root handler."""
    setup_logging()
    return logging.getLogger(name)
