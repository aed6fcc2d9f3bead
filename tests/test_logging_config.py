"""Tests for logging setup."""

import json
import logging

from ledgersync.logging_config import JSONFormatter, setup_logging


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord(
        name="ledgersync.domain.sync",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Record %s not synced",
        args=("tp-1",),
        exc_info=None,
    )
    record.origin = "Tuition"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "ledgersync.domain.sync"
    assert payload["message"] == "Record tp-1 not synced"
    assert payload["origin"] == "Tuition"
    assert "entry_id" not in payload


def test_setup_logging_replaces_handlers():
    setup_logging("DEBUG", "json")
    setup_logging("INFO", "text")

    logger = logging.getLogger("ledgersync")
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert not isinstance(logger.handlers[0].formatter, JSONFormatter)
