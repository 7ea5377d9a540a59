from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .conversation import append_turn
from .exceptions import MalformedOutput, ServiceUnavailable
from .fallbacks import (
    CHAT_EMPTY_REPLY,
    CHAT_FALLBACK,
    TRANSLATION_EMPTY,
    TRANSLATION_FALLBACK,
    unavailable_feed,
)
from .invokers import DEFAULT_SEARCH_MAX_OUTPUT_TOKENS, Capability, ModelInvoker, build_invoker
from .models import ConversationTurn, NewsArticle, TranslationRequest
from .parser import RAW_EXCERPT_CHARS, decode_articles
from .prompts import COMPANY_INSTRUCTION, build_news_prompt, build_translation_prompt
from .reconciler import reconcile

logger = logging.getLogger(__name__)


@dataclass
class AssistantOptions:
    provider: str = "gemini"  # "gemini" | "openai"
    model: Optional[str] = None
    timeout_sec: float = 30.0
    news_max_output_tokens: int = DEFAULT_SEARCH_MAX_OUTPUT_TOKENS
    news_article_count: int = 5
    max_concurrency: int = 4
    system_instruction: str = COMPANY_INSTRUCTION


class NexusAssistant:
    """
    High-level API: company chat, translation and grounded industry news.

    Every public coroutine resolves to a usable value. Failures are logged and
    replaced by the fixed fallbacks in nexus_ai.fallbacks, so callers never
    need an error branch. Nothing is kept between calls; conversation history
    belongs to the caller.
    """

    def __init__(self, invoker: Optional[ModelInvoker] = None, *, options: Optional[AssistantOptions] = None) -> None:
        self.options = options or AssistantOptions()
        if invoker is None:
            invoker = build_invoker(
                provider=self.options.provider,
                model=self.options.model,
                timeout_sec=self.options.timeout_sec,
                search_max_output_tokens=self.options.news_max_output_tokens,
            )
        self._invoker = invoker

    async def chat(self, message: str, history: Sequence[ConversationTurn] = ()) -> str:
        """Answer message given the prior history (which must not contain message itself)."""
        try:
            reply = await self._invoker.invoke(
                Capability.CHAT,
                message,
                history=tuple(history),
                system_instruction=self.options.system_instruction,
            )
        except Exception:
            logger.exception("Chat request failed")
            return CHAT_FALLBACK
        text = reply.text.strip() if reply.text else ""
        return text or CHAT_EMPTY_REPLY

    async def converse(
        self, message: str, history: Sequence[ConversationTurn] = ()
    ) -> Tuple[str, Tuple[ConversationTurn, ...]]:
        """
        Like chat, but also return the history extended with this exchange.

        The user turn is appended only once a reply (or fallback) is in hand.
        """
        reply = await self.chat(message, history)
        new_history = append_turn(history, "user", message)
        new_history = append_turn(new_history, "assistant", reply)
        return reply, new_history

    async def translate(self, text: str, target_language: str) -> str:
        if not text or not text.strip():
            return ""
        try:
            reply = await self._invoker.invoke(
                Capability.TRANSLATE,
                build_translation_prompt(TranslationRequest(source_text=text, target_language=target_language)),
            )
        except Exception:
            logger.exception("Translation to %s failed", target_language)
            return TRANSLATION_FALLBACK
        translated = reply.text.strip() if reply.text else ""
        return translated or TRANSLATION_EMPTY

    async def fetch_news(self, industry_keyword: str) -> List[NewsArticle]:
        """
        Curated recent news for a keyword, with citations repaired from grounding data.

        Always returns at least one article.
        """
        prompt = build_news_prompt(industry_keyword, article_count=self.options.news_article_count)
        try:
            reply = await self._invoker.invoke(Capability.GROUNDED_SEARCH, prompt)
            articles = decode_articles(reply.text)
            articles = reconcile(articles, reply.grounding_references)
        except MalformedOutput as e:
            logger.warning("Unparsable news for %r: %s", industry_keyword, e)
            logger.warning("Raw response: %s...", (e.raw or "")[:RAW_EXCERPT_CHARS])
            return unavailable_feed()
        except ServiceUnavailable as e:
            logger.warning("News service unavailable for %r: %s", industry_keyword, e)
            return unavailable_feed()
        except Exception:
            logger.exception("News aggregation failed for %r", industry_keyword)
            return unavailable_feed()
        if not articles:
            logger.info("Model returned no articles for %r", industry_keyword)
            return unavailable_feed()
        return articles

    async def fetch_news_many(self, keywords: Iterable[str]) -> Dict[str, List[NewsArticle]]:
        """Fetch several keywords concurrently. Each keyword degrades on its own."""
        keys = list(dict.fromkeys(keywords))
        limit = asyncio.Semaphore(max(1, int(self.options.max_concurrency or 1)))

        async def _one(keyword: str) -> List[NewsArticle]:
            async with limit:
                return await self.fetch_news(keyword)

        results = await asyncio.gather(*(_one(k) for k in keys))
        return dict(zip(keys, results))
