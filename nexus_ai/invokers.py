from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, List, Optional, Protocol, Sequence

from .conversation import to_wire_format
from .exceptions import ServiceUnavailable
from .models import ConversationTurn, GroundingReference, ModelReply

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_MAX_OUTPUT_TOKENS = 2000


class Capability(str, Enum):
    CHAT = "chat"
    TRANSLATE = "translate"
    GROUNDED_SEARCH = "grounded_search"


class ModelInvoker(Protocol):
    async def invoke(
        self,
        capability: Capability,
        message: str,
        *,
        history: Sequence[ConversationTurn] = (),
        system_instruction: Optional[str] = None,
    ) -> ModelReply:  # pragma: no cover - interface
        ...


class GeminiInvoker:
    """Gemini through the google-genai SDK. Search grounding uses the Google Search tool."""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: Optional[str] = None,
        timeout_sec: float = 30.0,
        search_max_output_tokens: int = DEFAULT_SEARCH_MAX_OUTPUT_TOKENS,
        client: Any = None,
    ) -> None:
        try:
            from google import genai  # type: ignore
            from google.genai import types  # type: ignore
        except Exception as e:  # pragma: no cover - optional dep
            raise RuntimeError("google-genai package is required for Gemini. Install with `pip install google-genai`.") from e
        if client is None:
            if not api_key:
                raise RuntimeError("GEMINI_API_KEY (or GOOGLE_API_KEY) not set.")
            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(timeout_sec * 1000)),
            )
        self._client = client
        self._types = types
        self._model = model or "gemini-2.5-flash"
        self._search_max_output_tokens = search_max_output_tokens

    def _config(self, capability: Capability, system_instruction: Optional[str]) -> Any:
        cfg = {}
        if system_instruction:
            cfg["system_instruction"] = system_instruction
        if capability == Capability.GROUNDED_SEARCH:
            cfg["tools"] = [self._types.Tool(google_search=self._types.GoogleSearch())]
            cfg["max_output_tokens"] = self._search_max_output_tokens
        return self._types.GenerateContentConfig(**cfg)

    async def invoke(
        self,
        capability: Capability,
        message: str,
        *,
        history: Sequence[ConversationTurn] = (),
        system_instruction: Optional[str] = None,
    ) -> ModelReply:
        if history:
            contents: Any = to_wire_format(history, provider="gemini")
            contents.append({"role": "user", "parts": [{"text": message}]})
        else:
            contents = message
        try:
            resp = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=self._config(capability, system_instruction),
            )
        except Exception as e:
            raise ServiceUnavailable(f"Gemini request failed: {e}") from e
        try:
            text = resp.text or ""
            refs = _gemini_grounding(resp)
        except (AttributeError, TypeError, IndexError) as e:
            raise ServiceUnavailable(f"Unexpected Gemini response shape: {e}") from e
        logger.debug("Gemini %s reply: %d chars, %d grounding refs", capability.value, len(text), len(refs))
        return ModelReply(text=text, grounding_references=tuple(refs))


def _gemini_grounding(resp: Any) -> List[GroundingReference]:
    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return []
    meta = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(meta, "grounding_chunks", None) or []
    refs: List[GroundingReference] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if uri:
            refs.append(GroundingReference(uri=uri, title=getattr(web, "title", None)))
    return refs


class OpenAIInvoker:
    """OpenAI through AsyncOpenAI. Search grounding uses the Responses API web search tool."""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: Optional[str] = None,
        timeout_sec: float = 30.0,
        search_max_output_tokens: int = DEFAULT_SEARCH_MAX_OUTPUT_TOKENS,
        client: Any = None,
    ) -> None:
        if client is None:
            try:
                from openai import AsyncOpenAI  # type: ignore
            except Exception as e:  # pragma: no cover - optional dep
                raise RuntimeError("openai package is required for OpenAI. Install with `pip install openai`.") from e
            if not api_key:
                raise RuntimeError("OPENAI_API_KEY not set.")
            client = AsyncOpenAI(api_key=api_key)
        self._client = client
        self._model = model or "gpt-4o-mini"
        self._timeout = timeout_sec
        self._search_max_output_tokens = search_max_output_tokens

    async def invoke(
        self,
        capability: Capability,
        message: str,
        *,
        history: Sequence[ConversationTurn] = (),
        system_instruction: Optional[str] = None,
    ) -> ModelReply:
        if capability == Capability.GROUNDED_SEARCH:
            return await self._search(message, system_instruction)

        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.extend(to_wire_format(history, provider="openai"))
        messages.append({"role": "user", "content": message})
        try:
            resp = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                timeout=self._timeout,
            )
        except Exception as e:
            raise ServiceUnavailable(f"OpenAI request failed: {e}") from e
        try:
            content = resp.choices[0].message.content if resp and resp.choices else None
        except (AttributeError, TypeError) as e:
            raise ServiceUnavailable(f"Unexpected OpenAI response shape: {e}") from e
        return ModelReply(text=content or "")

    async def _search(self, prompt: str, system_instruction: Optional[str]) -> ModelReply:
        kwargs = {}
        if system_instruction:
            kwargs["instructions"] = system_instruction
        try:
            resp = await self._client.responses.create(
                model=self._model,
                input=prompt,
                tools=[{"type": "web_search_preview"}],
                max_output_tokens=self._search_max_output_tokens,
                timeout=self._timeout,
                **kwargs,
            )
        except Exception as e:
            raise ServiceUnavailable(f"OpenAI search request failed: {e}") from e
        try:
            text = resp.output_text or ""
            refs = _openai_citations(resp)
        except (AttributeError, TypeError) as e:
            raise ServiceUnavailable(f"Unexpected OpenAI response shape: {e}") from e
        logger.debug("OpenAI search reply: %d chars, %d citations", len(text), len(refs))
        return ModelReply(text=text, grounding_references=tuple(refs))


def _openai_citations(resp: Any) -> List[GroundingReference]:
    # url_citation annotations in order of appearance, first occurrence only
    seen = set()
    refs: List[GroundingReference] = []
    for item in getattr(resp, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for part in getattr(item, "content", None) or []:
            for ann in getattr(part, "annotations", None) or []:
                if getattr(ann, "type", None) != "url_citation":
                    continue
                url = getattr(ann, "url", None)
                if not url or url in seen:
                    continue
                seen.add(url)
                refs.append(GroundingReference(uri=url, title=getattr(ann, "title", None)))
    return refs


def build_invoker(
    *,
    provider: str = "gemini",
    model: Optional[str] = None,
    timeout_sec: float = 30.0,
    search_max_output_tokens: int = DEFAULT_SEARCH_MAX_OUTPUT_TOKENS,
) -> ModelInvoker:
    """Create the invoker for a provider, reading its credential from the environment."""
    provider = (provider or "").lower()
    if provider == "openai":
        return OpenAIInvoker(
            api_key=os.getenv("OPENAI_API_KEY"),
            model=model or os.getenv("OPENAI_MODEL"),
            timeout_sec=timeout_sec,
            search_max_output_tokens=search_max_output_tokens,
        )
    if provider in {"gemini", "google", "googleai"}:
        return GeminiInvoker(
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            model=model or os.getenv("GEMINI_MODEL"),
            timeout_sec=timeout_sec,
            search_max_output_tokens=search_max_output_tokens,
        )
    raise RuntimeError(f"Unknown provider: {provider!r}")
