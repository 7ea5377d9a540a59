from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from .models import UNAVAILABLE_URL, CitationTrust, GroundingReference, NewsArticle

logger = logging.getLogger(__name__)

URL_SCHEME_PREFIX = "http"


def is_linkable(url: Optional[str]) -> bool:
    """True when url looks like a real web link rather than empty text or the sentinel."""
    return bool(url) and url.startswith(URL_SCHEME_PREFIX)


def _grounding_uri(refs: Sequence[GroundingReference], index: int) -> Optional[str]:
    if index < len(refs):
        uri = refs[index].uri
        if is_linkable(uri):
            return uri
    return None


def reconcile(
    articles: Sequence[NewsArticle],
    grounding_references: Sequence[GroundingReference],
) -> List[NewsArticle]:
    """
    Fill missing or malformed article urls from grounding evidence.

    Priority per article i: the model's own url (if it starts with http) ->
    grounding_references[i].uri -> "#". Alignment is positional only; no
    content matching is done. Returns new records, inputs are not modified.
    """
    out: List[NewsArticle] = []
    for i, article in enumerate(articles):
        if is_linkable(article.url):
            out.append(replace(article, trust=CitationTrust.MODEL_ASSERTED))
            continue
        uri = _grounding_uri(grounding_references, i)
        if uri:
            out.append(replace(article, url=uri, trust=CitationTrust.GROUNDING_DERIVED))
            continue
        logger.debug("No citation available for article %d (%r)", i, article.title)
        out.append(replace(article, url=UNAVAILABLE_URL, trust=CitationTrust.UNAVAILABLE))
    return out
