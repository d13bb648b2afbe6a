"""Schema of the generateContent response envelope."""
from __future__ import annotations
from typing import Any

from pydantic import BaseModel, ValidationError

from gemini_gateway.upstream.errors import UpstreamFormatError


class Part(BaseModel):
    text: str | None = None


class Content(BaseModel):
    role: str | None = None
    parts: list[Part] = []


class Candidate(BaseModel):
    content: Content | None = None
    finishReason: str | None = None


class GenerateContentResponse(BaseModel):
    candidates: list[Candidate] = []


def extract_text(payload: dict[str, Any]) -> str:
    """Return the first candidate's first text part.

    Raises:
        UpstreamFormatError: if the payload has no usable text.
    """
    try:
        envelope = GenerateContentResponse.model_validate(payload)
    except ValidationError as e:
        raise UpstreamFormatError(f"Malformed upstream response: {e.error_count()} validation error(s)") from e

    if not envelope.candidates:
        raise UpstreamFormatError("Upstream response has no candidates")
    content = envelope.candidates[0].content
    if content is None or not content.parts or not content.parts[0].text:
        reason = envelope.candidates[0].finishReason or "unknown"
        raise UpstreamFormatError(f"Upstream candidate has no text (finishReason={reason})")
    return content.parts[0].text


def error_message(payload: Any, status_code: int) -> str:
    """Upstream ``error.message`` if present, else a generic status message."""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"API Error {status_code}"
