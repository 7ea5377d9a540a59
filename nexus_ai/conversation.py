from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import ConversationTurn

WELCOME_TEXT = (
    "Hello! I am Nexus, your AI Company Companion. I can help you with HR policies, "
    "SOPs, and organizational questions. How can I assist you today?"
)

# Gemini calls the assistant side of a conversation "model".
_GEMINI_ROLES = {"user": "user", "assistant": "model"}


def append_turn(
    history: Iterable[ConversationTurn],
    role: str,
    text: str,
    *,
    timestamp: Optional[datetime] = None,
) -> Tuple[ConversationTurn, ...]:
    """
    Return a new history with one turn appended.

    The input is never mutated; callers holding the old history keep a valid,
    unchanged sequence.
    """
    if timestamp is None:
        turn = ConversationTurn(role=role, text=text)
    else:
        turn = ConversationTurn(role=role, text=text, timestamp=timestamp)
    return (*history, turn)


def to_wire_format(history: Iterable[ConversationTurn], *, provider: str = "gemini") -> List[Dict[str, Any]]:
    """
    Map turns to the message shape the given provider expects, preserving order.

    gemini: {"role": "user" | "model", "parts": [{"text": ...}]}
    openai: {"role": "user" | "assistant", "content": ...}
    """
    provider = (provider or "").lower()
    if provider == "openai":
        return [{"role": t.role, "content": t.text} for t in history]
    if provider in {"gemini", "google", "googleai"}:
        return [{"role": _GEMINI_ROLES[t.role], "parts": [{"text": t.text}]} for t in history]
    raise ValueError(f"Unknown provider for wire format: {provider!r}")


def welcome_turn() -> ConversationTurn:
    """The greeting a fresh assistant conversation starts with."""
    return ConversationTurn(role="assistant", text=WELCOME_TEXT)
