"""Central logging setup for the project."""
from __future__ import annotations
import logging
import sys

STRUCTURED_FIELDS = ("attempt", "model", "outcome", "status")


class StructuredFormatter(logging.Formatter):
    """Append known structured fields as key=value pairs after the message."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = [
            f"{name}={getattr(record, name)}"
            for name in STRUCTURED_FIELDS
            if getattr(record, name, None) is not None
        ]
        if fields:
            line = f"{line} | {' '.join(fields)}"
        return line


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    Configure root logger with sane defaults.

    Args:
        level: Logging level, as a number or a name such as "DEBUG".
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    fmt = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    handler.setFormatter(StructuredFormatter(fmt))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
