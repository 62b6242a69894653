"""Quote candidate extractors.

Heuristics for spotting Tanakh quotations inside Mishnah/Bavli segments:
  - introducer phrases: שנאמר, דכתיב, אמר קרא ... followed by the verse text
  - quotation marks: "..." or ״...״ spans

Each extractor returns QuoteCandidate objects with segment-local offsets; pooling
and overlap removal happen in kol_hatorah.quotes.detect.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from kol_hatorah import config
from kol_hatorah.quotes.models import Confidence, QuoteCandidate, QuoteMethod
from kol_hatorah.text import normalize_text

INTRODUCERS = {
    "mishnah": ["שנאמר", "שנאמר בו", "שנאמר עליו"],
    "general": ["דכתיב", "כדכתיב", "שנאמר", "אמר קרא", "כתיב", "ככתוב"],
}

SENTENCE_STOP_RE = re.compile(r"[.:;?!？！׃]")
INNER_QUOTE_RE = re.compile(r'["״](.+?)["״]')
QUOTATION_MARKS_RE = re.compile(r'["״]([^"״]{4,200})["״]')


def _accept(text: str) -> Optional[str]:
    """Normalized form of ``text`` if it passes the length and word-count filter."""
    norm = normalize_text(text).norm
    if not (config.QUOTE_MIN_LEN_CHARS <= len(norm) <= config.QUOTE_MAX_LEN_CHARS):
        return None
    if len(norm.split()) < config.QUOTE_MIN_WORDS:
        return None
    return norm


def _introducer_list() -> List[str]:
    phrases: List[str] = []
    for group in ("mishnah", "general"):
        for phrase in INTRODUCERS[group]:
            if phrase not in phrases:
                phrases.append(phrase)
    return phrases


class QuoteExtractor:
    method: QuoteMethod
    confidence: Confidence

    def extract(self, text: str) -> List[QuoteCandidate]:
        raise NotImplementedError


class IntroWordExtractor(QuoteExtractor):
    method = QuoteMethod.INTRO_WORD
    confidence = Confidence.HIGH

    def __init__(self, introducers: Optional[List[str]] = None, window: Optional[int] = None):
        self.introducers = introducers or _introducer_list()
        self.window = window or config.QUOTE_INTRO_WINDOW

    def _span_after(self, text: str, start: int) -> Tuple[int, int, str]:
        remainder = text[start:]
        stop = SENTENCE_STOP_RE.search(remainder)
        stop_rel = stop.start() if stop else len(remainder)
        span = remainder[: min(stop_rel, self.window)]
        inner = INNER_QUOTE_RE.search(span)
        if inner:
            return start + inner.start(1), start + inner.end(1), inner.group(1).strip()
        return start, start + len(span), span.strip()

    def extract(self, text: str) -> List[QuoteCandidate]:
        text = text or ""
        candidates: List[QuoteCandidate] = []
        # longest phrase claims a position first: "כדכתיב" over "דכתיב" over "כתיב"
        claimed: List[Tuple[int, int]] = []
        for intro in sorted(self.introducers, key=len, reverse=True):
            idx = text.find(intro)
            while idx != -1:
                after = idx + len(intro)
                if any(idx < c_end and after > c_start for c_start, c_end in claimed):
                    idx = text.find(intro, after)
                    continue
                claimed.append((idx, after))
                start, end, extracted = self._span_after(text, after)
                norm = _accept(extracted)
                if norm is not None:
                    candidates.append(QuoteCandidate(
                        method=self.method,
                        start=start,
                        end=end,
                        raw_text=extracted,
                        normalized_text=norm,
                        signal=intro,
                        confidence=self.confidence,
                    ))
                idx = text.find(intro, after)
        return candidates


class QuotationMarksExtractor(QuoteExtractor):
    method = QuoteMethod.QUOTATION_MARKS
    confidence = Confidence.MEDIUM

    def extract(self, text: str) -> List[QuoteCandidate]:
        candidates: List[QuoteCandidate] = []
        for m in QUOTATION_MARKS_RE.finditer(text or ""):
            raw = m.group(1).strip()
            norm = _accept(raw)
            if norm is None:
                continue
            candidates.append(QuoteCandidate(
                method=self.method,
                start=m.start(),
                end=m.end(),
                raw_text=raw,
                normalized_text=norm,
                signal="quotes",
                confidence=self.confidence,
            ))
        return candidates


__all__ = ["INTRODUCERS", "QuoteExtractor", "IntroWordExtractor", "QuotationMarksExtractor"]
