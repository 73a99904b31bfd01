"""
Unit tests for JSON logging (common.logging_setup)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.logging_setup import JsonFormatter, setup_logging


def _record(msg, extra=None):
    record = logging.LogRecord("playback.scheduler", logging.INFO, __file__, 1, msg, None, None)
    if extra is not None:
        record.extra = extra
    return record


class TestJsonFormatter:
    """Test cases for JsonFormatter"""

    def test_plain_message(self):
        out = json.loads(JsonFormatter().format(_record("File replay finished")))
        assert out["lvl"] == "INFO"
        assert out["name"] == "playback.scheduler"
        assert out["msg"] == "File replay finished"
        assert "extra" not in out

    def test_structured_fields_with_dates_and_paths(self):
        when = datetime(2023, 1, 1, tzinfo=timezone.utc)
        out = json.loads(JsonFormatter().format(_record("x", {"source": Path("01.modraw"), "date": when, "packets": 2})))
        assert out["extra"] == {"source": "01.modraw", "date": str(when), "packets": 2}


class TestSetupLogging:
    """Test cases for setup_logging"""

    def test_force_reapplies_level(self):
        root = logging.getLogger()
        saved = (root.level, list(root.handlers))
        try:
            setup_logging("WARNING", force=True)
            assert root.level == logging.WARNING
            setup_logging("DEBUG")
            assert root.level == logging.WARNING
            setup_logging("not-a-level", force=True)
            assert root.level == logging.INFO
            assert isinstance(root.handlers[0].formatter, JsonFormatter)
        finally:
            root.handlers[:] = saved[1]
            root.setLevel(saved[0])
