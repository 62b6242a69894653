"""Hebrew text normalization.

normalize_text() produces two forms of a segment or query:
  - plain: markup stripped, a narrow set of HTML entities resolved
  - norm: plain, further stripped of niqqud/te'amim, final letters folded to
    their medial forms, punctuation collapsed to single spaces

The normalized form is what the lexical store indexes and what quotation
linking compares token by token.
"""
from __future__ import annotations

import re
from typing import List, NamedTuple

HTML_TAG_RE = re.compile(r"<[^>]*>")
ENTITIES = {
    "&nbsp;": " ",
    "&thinsp;": " ",
    "&amp;": "&",
    "&quot;": '"',
    "&#39;": "'",
}
ENTITY_RE = re.compile("|".join(re.escape(e) for e in ENTITIES))

# maqaf, paseq, sof pasuq and nun hafukha separate words
HEBREW_SEPARATORS_RE = re.compile("[\u05be\u05c0\u05c3\u05c6]")
HEBREW_MARKS_RE = re.compile("[\u0591-\u05c7]")
FINAL_LETTERS = str.maketrans("ךםןףץ", "כמנפצ")
PUNCTUATION_RE = re.compile(r"[^\w\s]|_")
WHITESPACE_RE = re.compile(r"\s+")

PREFIX_LETTERS = ("", "ו", "ב", "כ", "ל", "מ", "ה")

SMART_DOUBLE_RE = re.compile("[”“״„]")
SMART_SINGLE_RE = re.compile("[‘’‚׳]")
# gershayim or geresh inside a word, as in תנ"ך
WORD_INTERNAL_QUOTE_RE = re.compile(r"(?<=\w)[\"'](?=\w)")


class NormalizedText(NamedTuple):
    plain: str
    norm: str


def normalize_text(text: str | None) -> NormalizedText:
    raw = text or ""
    plain = HTML_TAG_RE.sub("", raw)
    plain = ENTITY_RE.sub(lambda m: ENTITIES[m.group(0)], plain)

    norm = HEBREW_SEPARATORS_RE.sub(" ", plain)
    norm = HEBREW_MARKS_RE.sub("", norm)
    norm = norm.translate(FINAL_LETTERS)
    norm = PUNCTUATION_RE.sub(" ", norm)
    norm = WHITESPACE_RE.sub(" ", norm).strip()
    return NormalizedText(plain=plain.strip(), norm=norm)


def tokenize(text: str | None) -> List[str]:
    """Split the normalized form of ``text`` on whitespace."""
    return normalize_text(text).norm.split()


def expand_hebrew_prefixes(term: str) -> List[str]:
    """Return ``term`` with each inseparable prefix letter attached, bare form first."""
    variants: List[str] = []
    for prefix in PREFIX_LETTERS:
        candidate = f"{prefix}{term}"
        if candidate not in variants:
            variants.append(candidate)
    return variants


def normalize_query_input(text: str | None) -> str:
    """Fold quote glyphs to ASCII, squeeze whitespace, drop an unmatched trailing quote."""
    q = text or ""
    q = SMART_DOUBLE_RE.sub('"', q)
    q = SMART_SINGLE_RE.sub("'", q)
    q = WHITESPACE_RE.sub(" ", q).strip()
    internal = [m.group() for m in WORD_INTERNAL_QUOTE_RE.finditer(q)]
    for quote in ('"', "'"):
        delimiters = q.count(quote) - internal.count(quote)
        if q and q.endswith(quote) and delimiters % 2 != 0:
            q = q[:-1].rstrip()
    return q


def snippet_around(text: str, term: str, width: int = 120) -> str:
    """A window of ``width`` characters centred on the first occurrence of ``term``."""
    text = text or ""
    pos = text.find(term) if term else -1
    start = max(0, pos - width // 2) if pos >= 0 else 0
    return text[start:start + width]


def has_hebrew(text: str) -> bool:
    return re.search("[א-ת]", text or "") is not None


def has_latin(text: str) -> bool:
    return re.search("[A-Za-z]", text or "") is not None


__all__ = [
    "NormalizedText",
    "normalize_text",
    "tokenize",
    "expand_hebrew_prefixes",
    "normalize_query_input",
    "snippet_around",
    "has_hebrew",
    "has_latin",
    "PREFIX_LETTERS",
]
