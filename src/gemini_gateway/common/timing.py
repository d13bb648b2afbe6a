"""Delay helper used by the dispatcher backoff path."""
from __future__ import annotations
import time


def wait(milliseconds: int) -> None:
    """Block the calling request for ``milliseconds``."""
    time.sleep(milliseconds / 1000)
