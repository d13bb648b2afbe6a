"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel


class ConversationTurn(BaseModel):
    """One message of caller-supplied chat history."""
    role: str = "user"
    content: str | None = None


class GenerateIn(BaseModel):
    prompt: str | None = None
    history: list[ConversationTurn] | None = None


class GenerateOut(BaseModel):
    response: str
    model: str


class ExportIn(BaseModel):
    content: str | None = None


@dataclass
class GenerationResult:
    """Successful upstream call: raw payload plus the model that produced it."""
    payload: dict[str, Any]
    model: str
    attempts: int = 1
