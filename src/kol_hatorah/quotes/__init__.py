from kol_hatorah.quotes.detect import (
    dedupe_candidates,
    detect_quote_candidates,
    detect_quotes_with_links,
    sort_candidates,
)
from kol_hatorah.quotes.extractors import INTRODUCERS, IntroWordExtractor, QuotationMarksExtractor
from kol_hatorah.quotes.link import link_to_tanakh
from kol_hatorah.quotes.models import (
    Confidence,
    QuoteCandidate,
    QuoteDetectionResult,
    QuoteLink,
    QuoteMethod,
    QuoteVerdict,
)
from kol_hatorah.quotes.render import render_quote_results

__all__ = [
    "dedupe_candidates",
    "detect_quote_candidates",
    "detect_quotes_with_links",
    "sort_candidates",
    "INTRODUCERS",
    "IntroWordExtractor",
    "QuotationMarksExtractor",
    "link_to_tanakh",
    "Confidence",
    "QuoteCandidate",
    "QuoteDetectionResult",
    "QuoteLink",
    "QuoteMethod",
    "QuoteVerdict",
    "render_quote_results",
]
