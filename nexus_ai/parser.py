from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import MalformedOutput
from .models import NewsArticle

logger = logging.getLogger(__name__)

FENCE = "```"
ARTICLE_FIELDS = ("title", "summary", "source", "date", "url")
RAW_EXCERPT_CHARS = 500

# Opening fence with an optional language tag, or a bare closing fence.
_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*[ \t]*\n?")


def strip_code_fences(raw: str) -> str:
    """
    Remove markdown code fences wrapped around a JSON payload.

    Only fence markers and surrounding whitespace are removed; nothing else
    in the text is touched.
    """
    if FENCE not in raw:
        return raw.strip()
    return _FENCE_RE.sub("", raw).strip()


def _field(obj: Dict[str, Any], key: str, index: int) -> str:
    val = obj.get(key)
    if val is None:
        return ""
    if not isinstance(val, str):
        raise MalformedOutput(f"Article {index} field {key!r} is {type(val).__name__}, expected string")
    return val


def _to_article(obj: Any, index: int) -> NewsArticle:
    if not isinstance(obj, dict):
        raise MalformedOutput(f"Article {index} is {type(obj).__name__}, expected object")
    title, summary, source, date, url = (_field(obj, k, index) for k in ARTICLE_FIELDS)
    return NewsArticle(title=title, summary=summary, source=source, date=date, url=url)


def decode_articles(raw: Optional[str]) -> List[NewsArticle]:
    """
    Parse model output into NewsArticle records.

    Raises MalformedOutput when the payload is not a JSON array of article
    objects. There is no partial recovery: one bad element fails the whole
    payload.
    """
    text = strip_code_fences(raw or "")
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise MalformedOutput(f"Invalid JSON in model output ({e})", raw=text[:RAW_EXCERPT_CHARS]) from e
    if not isinstance(data, list):
        raise MalformedOutput(
            f"Expected a JSON array, got {type(data).__name__}", raw=text[:RAW_EXCERPT_CHARS]
        )
    try:
        return [_to_article(obj, i) for i, obj in enumerate(data)]
    except MalformedOutput as e:
        e.raw = text[:RAW_EXCERPT_CHARS]
        raise


def parse_articles(raw: Optional[str]) -> Tuple[List[NewsArticle], Optional[MalformedOutput]]:
    """
    Non-raising variant of decode_articles.

    Returns (articles, None) on success and ([], error) on failure. The raw
    excerpt goes to the log only.
    """
    try:
        return decode_articles(raw), None
    except MalformedOutput as e:
        logger.warning("Failed to parse news JSON: %s", e)
        logger.warning("Raw response: %s...", e.raw)
        return [], e
