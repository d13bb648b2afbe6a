from __future__ import annotations

import logging

from gemini_gateway.common.logging_setup import StructuredFormatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("gemini_gateway.dispatcher", logging.WARNING, __file__, 1, "switching %s", ("model-a",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_fields_appended() -> None:
    fmt = StructuredFormatter("%(levelname)s %(message)s")
    line = fmt.format(_record(attempt=2, model="model-a", outcome="switch_model", status=429))
    assert line == "WARNING switching model-a | attempt=2 model=model-a outcome=switch_model status=429"


def test_plain_record_unchanged() -> None:
    fmt = StructuredFormatter("%(levelname)s %(message)s")
    assert fmt.format(_record()) == "WARNING switching model-a"
