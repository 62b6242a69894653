"""Plain-text rendering of PlanResult values for the CLI and the text API."""
from __future__ import annotations

import re
from typing import Optional

from kol_hatorah.citations import hebrew_citations
from kol_hatorah.planner.types import PlanResult, QueryIntent, QueryPlan, ScopeConstraint, ScopeNodeType
from kol_hatorah.quotes.render import render_quote_results
from kol_hatorah.refs import format_hebrew_ref
from kol_hatorah.taxonomy import display_work_name

MAX_CHARS = 160
CLIP_MARKER = "… (מקוצר)"

CORPUS_DISPLAY = {"tanakh": 'תנ"ך', "mishnah": "משנה", "bavli": "בבלי"}

KNOWN_ENTITIES = {"&nbsp;": " ", "&amp;": "&", "&quot;": '"', "&#39;": "'"}
OTHER_ENTITY_RE = re.compile(r"&[a-zA-Z0-9#]+;")
TAG_RE = re.compile(r"<[^>]*>")
SPACE_RE = re.compile(r"\s+")


def sanitize_display_text(text: str) -> str:
    t = text or ""
    for entity, repl in KNOWN_ENTITIES.items():
        t = t.replace(entity, repl)
    t = OTHER_ENTITY_RE.sub(" ", t)
    t = TAG_RE.sub(" ", t)
    return SPACE_RE.sub(" ", t).strip()


def clip_text(text: str, max_chars: int = MAX_CHARS) -> str:
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}{CLIP_MARKER}"


def scope_text(scope: Optional[ScopeConstraint]) -> str:
    if scope is None:
        return "בקורפוס"
    if scope.work:
        return f"ב{display_work_name(scope.work)}"
    if scope.node is not None and scope.node.type == ScopeNodeType.CORPUS:
        return f"ב{CORPUS_DISPLAY.get(scope.node.name, scope.node.name)}"
    if scope.node is not None:
        return f"ב{scope.node.name}"
    return "בקורפוס"


def render_result(result: PlanResult) -> str:
    if result.kind == "DISAMBIGUATION_REQUIRED":
        suggestions = "\n- ".join(result.suggestions)
        return f"{result.message}\nהצעות:\n- {suggestions}"
    if result.kind == "REFUSAL":
        return result.message

    if result.works:
        listing = "\n".join(
            f"{display_work_name(w.work)}{f' ({w.count})' if w.count else ''}" for w in result.works
        )
        return "\n".join(p for p in (result.answer, listing) if p)

    rows = "\n".join(
        f"{format_hebrew_ref(r.ref)}: {r.text[:120]}{'...' if len(r.text) > 120 else ''}" for r in result.rows or []
    )
    citations = hebrew_citations(result.citations or [])
    return "\n".join(p for p in (result.answer, rows, f"ציטוטים: {citations}" if citations else "") if p)


def render_word_occurrences(
    result: PlanResult,
    term: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> str:
    """Headline with the total hit count, then one clipped line per source."""
    if result.kind != "OK":
        return getattr(result, "message", "")

    rows = result.rows or []
    scanned = result.totals.scanned if result.totals else len(rows)
    limit = len(rows) if limit is None else limit
    plan = result.plan
    term = term or (plan.term if plan else "") or ""
    where = scope_text(plan.scope if plan else None)

    if scanned > 0:
        showing = ""
        if scanned > limit:
            start = f" החל מ-{offset + 1}" if offset > 0 else ""
            showing = f" הנה {limit}{start} מהם:"
        headline = f"נמצאו {scanned} מקורות {where} שבהם מופיעה המילה ‘{term}’.{showing}"
    else:
        headline = f"לא נמצאו מקורות {where} עבור המילה ‘{term}’."

    body = "\n".join(
        f"{format_hebrew_ref(r.ref)} — {clip_text(sanitize_display_text(r.text))}" for r in rows
    )
    return "\n".join(p for p in (headline, body) if p)


def render_answer(
    plan: QueryPlan,
    result: PlanResult,
    limit: Optional[int] = None,
    offset: int = 0,
    show_tanakh_text: bool = False,
    show_mishnah_text: bool = False,
) -> str:
    """Pick the renderer that fits the plan's intent."""
    if plan.intent == QueryIntent.CORPUS_QUOTE_QUERY:
        return render_quote_results(
            result,
            show_tanakh_text=show_tanakh_text,
            show_mishnah_text=show_mishnah_text,
            limit=limit,
            offset=offset,
        )
    if plan.intent == QueryIntent.WORD_OCCURRENCES:
        return render_word_occurrences(result, term=plan.term, limit=limit, offset=offset)
    return render_result(result)


__all__ = [
    "render_answer",
    "render_result",
    "render_word_occurrences",
    "sanitize_display_text",
    "clip_text",
    "scope_text",
]
