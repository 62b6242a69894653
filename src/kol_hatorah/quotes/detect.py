from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from kol_hatorah.quotes.extractors import IntroWordExtractor, QuotationMarksExtractor, QuoteExtractor
from kol_hatorah.quotes.link import link_to_tanakh
from kol_hatorah.quotes.models import CONFIDENCE_RANK, QuoteCandidate, QuoteDetectionResult, QuoteVerdict

logger = logging.getLogger(__name__)

EXTRACTORS: Sequence[QuoteExtractor] = (IntroWordExtractor(), QuotationMarksExtractor())


def sort_candidates(candidates: Iterable[QuoteCandidate]) -> List[QuoteCandidate]:
    """Highest confidence first, then earliest start."""
    return sorted(candidates, key=lambda c: (-CONFIDENCE_RANK[c.confidence], c.start))


def dedupe_candidates(candidates: Iterable[QuoteCandidate]) -> List[QuoteCandidate]:
    """Greedy overlap removal: a kept candidate is never displaced by a later one."""
    kept: List[QuoteCandidate] = []
    for cand in sort_candidates(candidates):
        if any(cand.overlaps(k) for k in kept):
            continue
        kept.append(cand)
    return kept


def detect_quote_candidates(text: str, extractors: Optional[Sequence[QuoteExtractor]] = None) -> List[QuoteCandidate]:
    pooled: List[QuoteCandidate] = []
    for extractor in extractors or EXTRACTORS:
        pooled.extend(extractor.extract(text or ""))
    return dedupe_candidates(pooled)


def detect_quotes_with_links(text: str, store=None, top_k: Optional[int] = None) -> List[QuoteDetectionResult]:
    """Detect candidates in ``text`` and verify each against Tanakh.

    Without a store every candidate is reported UNCONFIRMED.
    """
    results: List[QuoteDetectionResult] = []
    for cand in detect_quote_candidates(text):
        links = link_to_tanakh(cand, store, top_k=top_k) if store is not None else []
        verdict = QuoteVerdict.CONFIRMED if links else QuoteVerdict.UNCONFIRMED
        results.append(QuoteDetectionResult(candidate=cand, verdict=verdict, links=links))
    if results:
        confirmed = sum(1 for r in results if r.confirmed)
        logger.debug(f"quotes: {len(results)} candidates, {confirmed} confirmed")
    return results


__all__ = [
    "EXTRACTORS",
    "sort_candidates",
    "dedupe_candidates",
    "detect_quote_candidates",
    "detect_quotes_with_links",
]
