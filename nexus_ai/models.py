from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

UNAVAILABLE_URL = "#"

ROLES = ("user", "assistant")


class CitationTrust(str, Enum):
    """Provenance of a NewsArticle's url."""

    MODEL_ASSERTED = "model-asserted"
    GROUNDING_DERIVED = "grounding-derived"
    UNAVAILABLE = "unavailable"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ConversationTurn:
    """One message in an assistant conversation. History is a tuple of these, oldest first."""
    role: str
    text: str
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown conversation role: {self.role!r}")


@dataclass(frozen=True)
class NewsArticle:
    """
    Stable public model representing one curated news article.

    WARNING: Do not change fields lightly. This is the library's contract.
    """
    title: str
    summary: str
    source: str
    date: str
    url: str
    trust: CitationTrust = CitationTrust.MODEL_ASSERTED


@dataclass(frozen=True)
class GroundingReference:
    uri: str
    title: Optional[str] = None


@dataclass(frozen=True)
class ModelReply:
    text: str
    grounding_references: Tuple[GroundingReference, ...] = ()


@dataclass(frozen=True)
class TranslationRequest:
    source_text: str
    target_language: str
