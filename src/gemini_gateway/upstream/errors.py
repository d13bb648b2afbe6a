"""Errors raised on the generation path."""
from __future__ import annotations


class GenerationError(Exception):
    """Terminal failure of a generation request."""


class UpstreamAPIError(GenerationError):
    """Upstream answered with a non-2xx status that was not recovered."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamConnectionError(GenerationError):
    """The call to the upstream could not complete after all retries."""


class UpstreamFormatError(GenerationError):
    """Upstream payload does not match the expected envelope."""
