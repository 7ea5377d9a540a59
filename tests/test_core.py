import asyncio
import logging

import pytest

from nexus_ai import AssistantOptions, NexusAssistant
from nexus_ai.conversation import append_turn
from nexus_ai.exceptions import ServiceUnavailable
from nexus_ai.fallbacks import (
    CHAT_EMPTY_REPLY,
    CHAT_FALLBACK,
    TRANSLATION_EMPTY,
    TRANSLATION_FALLBACK,
    UNAVAILABLE_FEED_TITLE,
)
from nexus_ai.invokers import Capability
from nexus_ai.models import CitationTrust, ModelReply
from nexus_ai.prompts import COMPANY_INSTRUCTION


def _run(coro):
    return asyncio.run(coro)


# chat

def test_chat_returns_model_text(fake_invoker):
    inv = fake_invoker(text="You get 20 PTO days.")
    assistant = NexusAssistant(inv)
    assert _run(assistant.chat("How much PTO?")) == "You get 20 PTO days."
    call = inv.calls[0]
    assert call["capability"] is Capability.CHAT
    assert call["system_instruction"] == COMPANY_INSTRUCTION


def test_chat_service_failure_returns_fixed_apology(fake_invoker):
    assistant = NexusAssistant(fake_invoker(error=ServiceUnavailable("boom")))
    assert _run(assistant.chat("hi")) == (
        "I am currently having trouble accessing the company database. Please try again later."
    )


def test_chat_unexpected_error_also_degrades(fake_invoker):
    assistant = NexusAssistant(fake_invoker(error=RuntimeError("bug")))
    assert _run(assistant.chat("hi")) == CHAT_FALLBACK


def test_chat_empty_reply(fake_invoker):
    assistant = NexusAssistant(fake_invoker(text="   "))
    assert _run(assistant.chat("hi")) == CHAT_EMPTY_REPLY


def test_chat_does_not_swallow_cancellation(fake_invoker):
    assistant = NexusAssistant(fake_invoker(error=asyncio.CancelledError()))
    with pytest.raises(asyncio.CancelledError):
        _run(assistant.chat("hi"))


def test_converse_sends_prior_history_and_appends_after_reply(fake_invoker):
    inv = fake_invoker(text="Tue/Thu.")
    assistant = NexusAssistant(inv)
    history = append_turn(append_turn((), "user", "hello"), "assistant", "Hi there")

    reply, new_history = _run(assistant.converse("Which days are remote?", history))

    assert reply == "Tue/Thu."
    sent = inv.calls[0]["history"]
    assert sent == history
    assert all(t.text != "Which days are remote?" for t in sent)
    assert inv.calls[0]["message"] == "Which days are remote?"
    assert len(history) == 2
    assert [(t.role, t.text) for t in new_history[2:]] == [
        ("user", "Which days are remote?"),
        ("assistant", "Tue/Thu."),
    ]


# translate

def test_translate_returns_text(fake_invoker):
    inv = fake_invoker(text="Hola\n")
    assistant = NexusAssistant(inv)
    assert _run(assistant.translate("Hello", "Spanish")) == "Hola"
    assert inv.calls[0]["capability"] is Capability.TRANSLATE
    assert "Spanish" in inv.calls[0]["message"]
    assert '"Hello"' in inv.calls[0]["message"]


def test_translate_empty_upstream_text(fake_invoker):
    assistant = NexusAssistant(fake_invoker(text=""))
    assert _run(assistant.translate("Hello", "French")) == "Translation failed."


def test_translate_failure(fake_invoker):
    assistant = NexusAssistant(fake_invoker(error=ServiceUnavailable("down")))
    assert _run(assistant.translate("Hello", "French")) == TRANSLATION_FALLBACK


def test_translate_blank_input_skips_service(fake_invoker):
    inv = fake_invoker(text="should not be used")
    assistant = NexusAssistant(inv)
    assert _run(assistant.translate("   ", "German")) == ""
    assert inv.calls == []


# news

def test_news_well_formed_keeps_model_url(fake_invoker):
    raw = '[{"title":"A","summary":"B","source":"C","date":"D","url":"https://x.com"}]'
    inv = fake_invoker(text=raw)
    articles = _run(NexusAssistant(inv).fetch_news("Energy"))
    assert len(articles) == 1
    a = articles[0]
    assert (a.title, a.summary, a.source, a.date, a.url) == ("A", "B", "C", "D", "https://x.com")
    assert a.trust is CitationTrust.MODEL_ASSERTED
    assert inv.calls[0]["capability"] is Capability.GROUNDED_SEARCH
    assert '"Energy"' in inv.calls[0]["message"]


def test_news_missing_url_uses_grounding(fake_invoker):
    raw = '[{"title":"A","summary":"B","source":"C","date":"D","url":""}]'
    articles = _run(NexusAssistant(fake_invoker(text=raw, refs=["https://y.com"])).fetch_news("AI"))
    assert articles[0].url == "https://y.com"
    assert articles[0].trust is CitationTrust.GROUNDING_DERIVED


def test_news_fenced_payload_is_accepted(fake_invoker):
    raw = '```json\n[{"title":"A","summary":"B","source":"C","date":"D","url":"not-a-link"}]\n```'
    articles = _run(NexusAssistant(fake_invoker(text=raw)).fetch_news("AI"))
    assert articles[0].title == "A"
    assert articles[0].url == "#"


def test_news_service_failure_returns_unavailable_article(fake_invoker):
    articles = _run(NexusAssistant(fake_invoker(error=ServiceUnavailable("down"))).fetch_news("Finance"))
    assert len(articles) == 1
    assert articles[0].title == "News Feed Unavailable"
    assert articles[0].url == "#"
    assert articles[0].source == "System"


@pytest.mark.parametrize("raw", ["{not json", '{"title": "A"}', "[]", ""])
def test_news_malformed_or_empty_output_degrades(fake_invoker, raw):
    articles = _run(NexusAssistant(fake_invoker(text=raw)).fetch_news("Finance"))
    assert [a.title for a in articles] == [UNAVAILABLE_FEED_TITLE]


def test_news_malformed_output_logs_raw_excerpt(fake_invoker, caplog):
    with caplog.at_level(logging.WARNING, logger="nexus_ai.core"):
        _run(NexusAssistant(fake_invoker(text="{oops")).fetch_news("Finance"))
    assert "{oops" in caplog.text


def test_news_urls_are_links_or_sentinel(fake_invoker):
    raw = (
        '[{"title":"1","url":"https://a"},{"title":"2","url":""},'
        '{"title":"3","url":null},{"title":"4","url":"ftp://x"}]'
    )
    articles = _run(NexusAssistant(fake_invoker(text=raw, refs=["https://g0", "https://g1"])).fetch_news("AI"))
    assert len(articles) == 4
    for a in articles:
        assert a.url == "#" or a.url.startswith("http")
    assert [a.url for a in articles] == ["https://a", "https://g1", "#", "#"]


def test_fetch_news_many_degrades_per_keyword():
    good = '[{"title":"A","summary":"B","source":"C","date":"D","url":"https://x.com"}]'

    class ByKeyword:
        def __init__(self):
            self.active = 0
            self.peak = 0

        async def invoke(self, capability, message, *, history=(), system_instruction=None):
            self.active += 1
            self.peak = max(self.peak, self.active)
            await asyncio.sleep(0)
            self.active -= 1
            if '"Energy"' in message:
                raise ServiceUnavailable("down")
            return ModelReply(text=good)

    inv = ByKeyword()
    assistant = NexusAssistant(inv, options=AssistantOptions(max_concurrency=2))
    result = _run(assistant.fetch_news_many(["Technology", "Energy", "AI", "Technology"]))

    assert list(result) == ["Technology", "Energy", "AI"]
    assert result["Technology"][0].title == "A"
    assert result["Energy"][0].title == UNAVAILABLE_FEED_TITLE
    assert inv.peak <= 2


def test_news_prompt_honours_article_count(fake_invoker):
    inv = fake_invoker(text="[]")
    _run(NexusAssistant(inv, options=AssistantOptions(news_article_count=3)).fetch_news("AI"))
    assert "Find 3 distinct" in inv.calls[0]["message"]


def test_news_ignores_unsafe_grounding_uri(fake_invoker):
    raw = '[{"title":"A","summary":"B","source":"C","date":"D","url":""}]'
    articles = _run(NexusAssistant(fake_invoker(text=raw, refs=["javascript:alert(1)"])).fetch_news("AI"))
    assert articles[0].url == "#"
    assert articles[0].trust is CitationTrust.UNAVAILABLE
