"""Unit tests for the JSON log formatter."""

from __future__ import annotations

import io
import json
import logging

from vco_workflows.logging import JsonFormatter, configure_logging


def test_formatter_includes_extra_context() -> None:
    record = logging.LogRecord(
        "vco_workflows.parameter_set", logging.WARNING, __file__, 1, "Ignoring %s", ("x",), None
    )
    record.parameter = "runlist"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "vco_workflows.parameter_set"
    assert payload["message"] == "Ignoring x"
    assert payload["context"] == {"parameter": "runlist"}


def test_configure_logging_replaces_handlers() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    stream = io.StringIO()
    try:
        configure_logging("debug", stream=stream)
        configure_logging("info", stream=stream)

        assert len(root.handlers) == 1
        assert root.level == logging.INFO

        logging.getLogger("vco_workflows.test").info("hello", extra={"workflow_id": "w"})
        payload = json.loads(stream.getvalue().splitlines()[-1])
        assert payload["message"] == "hello"
        assert payload["context"] == {"workflow_id": "w"}
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
