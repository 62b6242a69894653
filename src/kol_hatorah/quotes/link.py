"""Verification of quote candidates against the Tanakh partition of the lexical store.

score = |candidate tokens found in the verse| / |candidate tokens|

The denominator is the candidate length, so a short exact sub-quotation of a long
verse scores 1.0 while a loose paraphrase scores low.
"""
from __future__ import annotations

from typing import List, Optional

from kol_hatorah import config
from kol_hatorah.quotes.models import QuoteCandidate, QuoteLink
from kol_hatorah.storage.schemas import ScopeFilter
from kol_hatorah.storage.sqlite import all_terms_expression
from kol_hatorah.text import tokenize

TANAKH_SCOPE = ScopeFilter(type="tanakh")


def link_to_tanakh(candidate: QuoteCandidate, store, top_k: Optional[int] = None) -> List[QuoteLink]:
    k = top_k or config.TANAKH_TOP_K
    words = tokenize(candidate.raw_text)
    if not words:
        return []

    rows = store.search_by_match(all_terms_expression(words), TANAKH_SCOPE, k)

    links: List[QuoteLink] = []
    for row in rows:
        verse_tokens = set(tokenize(row.text_plain))
        shared = [w for w in words if w in verse_tokens]
        score = len(shared) / len(words)
        if len(shared) >= config.TANAKH_MIN_SHARED_WORDS and score >= config.TANAKH_MIN_SCORE:
            links.append(QuoteLink(
                tanakh_ref=row.normalized_ref or row.ref,
                tanakh_id=row.id,
                score=score,
                shared_words=len(shared),
                total_words=len(words),
                tanakh_text=row.text_plain,
            ))

    links.sort(key=lambda link: -link.score)
    return links[:k]
