from __future__ import annotations

from typing import Optional


class NexusAIError(Exception):
    """Base class for errors raised inside the integration layer."""


class ServiceUnavailable(NexusAIError):
    """Raised when the generation service cannot be reached or answers with a failure."""


class MalformedOutput(NexusAIError):
    """Raised when model output cannot be parsed into the expected structured shape."""

    def __init__(self, message: str, *, raw: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw = raw
