"""Fixed values handed back to callers when an entry point fails."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from .models import UNAVAILABLE_URL, CitationTrust, NewsArticle

CHAT_FALLBACK = "I am currently having trouble accessing the company database. Please try again later."
CHAT_EMPTY_REPLY = "I'm sorry, I couldn't process that request."

TRANSLATION_EMPTY = "Translation failed."
TRANSLATION_FALLBACK = "Translation service unavailable."

UNAVAILABLE_FEED_TITLE = "News Feed Unavailable"
UNAVAILABLE_FEED_SUMMARY = (
    "Unable to fetch live news at this moment. Please check your connection or try again."
)


def unavailable_feed(now: Optional[datetime] = None) -> List[NewsArticle]:
    """Single-article feed shown in place of live news."""
    when = now or datetime.now(timezone.utc)
    return [
        NewsArticle(
            title=UNAVAILABLE_FEED_TITLE,
            summary=UNAVAILABLE_FEED_SUMMARY,
            source="System",
            date=when.isoformat(),
            url=UNAVAILABLE_URL,
            trust=CitationTrust.UNAVAILABLE,
        )
    ]
