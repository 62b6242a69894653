"""Citation helpers for answers built from retrieved segments."""
from __future__ import annotations

import re
from typing import Dict, Iterable, List

from kol_hatorah.refs import format_hebrew_ref
from kol_hatorah.taxonomy import display_work_name

TRAILING_SEGMENT_RE = re.compile(r"\.\d+$")


def display_citation(citation: Dict[str, str]) -> str:
    ref = TRAILING_SEGMENT_RE.sub("", citation.get("ref", ""))
    work = citation.get("work", "")
    if not work or ref.startswith(f"{work} "):
        return ref
    return f"{work} {ref}"


def deduplicate_citations(rows: Iterable) -> List[Dict[str, str]]:
    """Unique (work, ref) pairs in first-seen order; rows may be dicts or models."""
    seen = set()
    citations: List[Dict[str, str]] = []
    for row in rows:
        work = row.get("work") if isinstance(row, dict) else getattr(row, "work", None)
        ref = row.get("ref") if isinstance(row, dict) else getattr(row, "ref", None)
        key = (work, ref)
        if key in seen:
            continue
        seen.add(key)
        citations.append({"work": work or "", "ref": ref or ""})
    return citations


def format_citations(citations: List[Dict[str, str]]) -> str:
    return ", ".join(f"[{i}] {display_citation(c)}" for i, c in enumerate(citations, 1))


def hebrew_citation(citation: str) -> str:
    """Genesis 1:3 -> בראשית א׳:ג׳. Folio references (Shabbat 31a:6) keep their digits."""
    work, _, loc = citation.rpartition(" ")
    if not work:
        return citation
    return format_hebrew_ref(f"{display_work_name(work)} {loc}")


def hebrew_citations(citations: List[str]) -> str:
    return ", ".join(f"[{i}] {hebrew_citation(c)}" for i, c in enumerate(citations, 1))


__all__ = ["display_citation", "deduplicate_citations", "format_citations", "hebrew_citation", "hebrew_citations"]
