from __future__ import annotations

from typing import List, Optional

import pytest

from nexus_ai.models import GroundingReference, ModelReply


class FakeInvoker:
    """Stands in for a model invoker; records every call."""

    def __init__(self, text: str = "", refs: Optional[List[str]] = None, error: Optional[BaseException] = None):
        self.text = text
        self.refs = tuple(GroundingReference(uri=u) for u in (refs or []))
        self.error = error
        self.calls = []

    async def invoke(self, capability, message, *, history=(), system_instruction=None):
        self.calls.append(
            {
                "capability": capability,
                "message": message,
                "history": history,
                "system_instruction": system_instruction,
            }
        )
        if self.error is not None:
            raise self.error
        return ModelReply(text=self.text, grounding_references=self.refs)


@pytest.fixture
def fake_invoker():
    return FakeInvoker
