"""Conversion of caller history into the upstream ``contents`` array."""
from __future__ import annotations
from typing import Any, Iterable

from gemini_gateway.common.schema import ConversationTurn


def upstream_role(role: str | None) -> str:
    return "user" if role == "user" else "model"


def build_contents(prompt: str, history: Iterable[ConversationTurn] | None = None) -> list[dict[str, Any]]:
    """
    Build the request ``contents``: history turns first, prompt last.

    Args:
        prompt: Current user prompt.
        history: Earlier turns; turns with empty content are dropped.
    """
    contents: list[dict[str, Any]] = []
    for turn in history or ():
        if not turn.content:
            continue
        contents.append({"role": upstream_role(turn.role), "parts": [{"text": turn.content}]})
    contents.append({"role": "user", "parts": [{"text": prompt}]})
    return contents
