"""
nexus_ai

A small integration layer that turns free-form output from a hosted generative model
into typed, application-safe results.

Core ideas:
- Input: plain parameters (a message and its history, text to translate, an industry keyword)
- Process: invoke model → strip fences → parse → reconcile citations with grounding data
- Output: str or List[NewsArticle], never an exception (failures become fixed fallbacks)

Example
-------
import asyncio
from nexus_ai import NexusAssistant, AssistantOptions

assistant = NexusAssistant(options=AssistantOptions(provider="gemini"))

async def main():
    reply, history = await assistant.converse("How many PTO days do I get?")
    print(reply)
    for article in await assistant.fetch_news("Energy"):
        print(article.date, article.source, article.title, article.url)

asyncio.run(main())
"""
from .models import (
    CitationTrust,
    ConversationTurn,
    GroundingReference,
    ModelReply,
    NewsArticle,
    TranslationRequest,
)
from .core import AssistantOptions, NexusAssistant
from .conversation import append_turn, to_wire_format
from .exceptions import MalformedOutput, ServiceUnavailable
from .parser import parse_articles
from .reconciler import reconcile

__all__ = [
    "NexusAssistant",
    "AssistantOptions",
    "ConversationTurn",
    "NewsArticle",
    "GroundingReference",
    "CitationTrust",
    "ModelReply",
    "TranslationRequest",
    "append_turn",
    "to_wire_format",
    "parse_articles",
    "reconcile",
    "ServiceUnavailable",
    "MalformedOutput",
]
