"""Plan execution against the lexical store and the general-QA collaborator."""
from __future__ import annotations

import logging
import re
from typing import List, Optional

from kol_hatorah.citations import deduplicate_citations, display_citation, format_citations
from kol_hatorah.planner.messages import message
from kol_hatorah.planner.registry import WorkRegistry
from kol_hatorah.planner.resolver import expand_subcorpus
from kol_hatorah.planner.types import (
    DisambiguationRequired,
    PlanOk,
    PlanResult,
    QueryIntent,
    QueryPlan,
    Refusal,
    ResultRow,
    ScanTotals,
    ScopeNodeType,
    WorkHit,
)
from kol_hatorah.quotes.detect import detect_quotes_with_links
from kol_hatorah.refs import format_ref
from kol_hatorah.storage.schemas import ScopeFilter, SegmentRow
from kol_hatorah.taxonomy import TANAKH_DIVISIONS, static_collections_of
from kol_hatorah.text import normalize_text

logger = logging.getLogger(__name__)


def _collection_of(work: str, registry: WorkRegistry) -> Optional[str]:
    found = registry.collection_of(work)
    if found:
        return found
    static = static_collections_of(work)
    return static[0] if static else None


def build_scope_filter(plan: QueryPlan, registry: WorkRegistry) -> ScopeFilter:
    scope = plan.scope
    node = scope.node
    fields = {}
    if scope.work:
        fields["work"] = scope.work
        if node is not None and node.type == ScopeNodeType.CORPUS:
            fields["type"] = node.name
        else:
            fields["type"] = _collection_of(scope.work, registry)
    elif node is not None and node.type == ScopeNodeType.CORPUS:
        fields["type"] = node.name
    elif node is not None and node.type == ScopeNodeType.SUBCORPUS:
        fields["type"] = "tanakh" if node.name in TANAKH_DIVISIONS else "mishnah"
        fields["work_in"] = expand_subcorpus(node, registry)
    if scope.chapter is not None and scope.work:
        fields["normalized_ref_prefix"] = f"{scope.work} {scope.chapter}:"
    return ScopeFilter(**fields)


def _rows(segments: List[SegmentRow]) -> List[ResultRow]:
    return [ResultRow(ref=format_ref(s.work, s.ref), text=s.text_plain, work=s.work) for s in segments]


def _ok(answer: str, plan: QueryPlan, segments: List[SegmentRow], **extra) -> PlanOk:
    citations = deduplicate_citations(segments)
    return PlanOk(
        answer=answer,
        rows=_rows(segments),
        citations=[display_citation(c) for c in citations],
        formatted_citations=format_citations(citations),
        plan=plan,
        **extra,
    )


def _refuse() -> Refusal:
    return Refusal(message=message("REFUSAL_INSUFFICIENT"))


def _empty_subcorpus(scope: ScopeFilter) -> bool:
    return scope.work_in is not None and not scope.work_in


def _exact_ref(plan: QueryPlan, store, registry: WorkRegistry, limit: int) -> PlanResult:
    ref = plan.ref.normalized_ref
    row = store.get_ref(ref)
    if row is not None:
        segments = [row]
    else:
        # "Genesis 1:1" covers "Genesis 1:1-3" and "Genesis 1:1.2" but not "Genesis 1:10"
        scope = ScopeFilter(work=plan.ref.work, type=_collection_of(plan.ref.work, registry))
        same_ref = re.compile(rf"^{re.escape(ref)}(?!\d)")
        segments = [r for r in store.get_by_prefix(ref, scope, limit) if same_ref.match(r.normalized_ref)]
    if not segments:
        return _refuse()
    return _ok(f"נמצאו {len(segments)} תוצאות", plan, segments)


def _term_search(plan: QueryPlan, store, registry: WorkRegistry, limit: int, offset: int) -> PlanResult:
    term_norm = normalize_text(plan.term or "").norm
    scope = build_scope_filter(plan, registry)
    if not term_norm or _empty_subcorpus(scope):
        return _refuse()
    segments = store.find_term(term_norm, scope, limit, offset)
    if not segments:
        return _refuse()
    total = store.count_term(term_norm, scope)
    totals = ScanTotals(scanned=total, limited=total > offset + len(segments))
    return _ok(f"נמצאו {total} מופעים", plan, segments, totals=totals)


def _list_works(plan: QueryPlan, store, registry: WorkRegistry, limit: int) -> PlanResult:
    term_norm = normalize_text(plan.term or "").norm
    scope = build_scope_filter(plan, registry)
    works = store.find_term_by_work(term_norm, scope, limit) if term_norm else []
    if not works:
        return _refuse()
    return PlanOk(
        answer="מסכתות שנמצאו:",
        works=[WorkHit(work=w.work, count=w.count) for w in works],
        plan=plan,
    )


def _chapter_about(plan: QueryPlan, store, registry: WorkRegistry, limit: int) -> PlanResult:
    if not (plan.scope.work and plan.scope.chapter is not None):
        return _refuse()
    scope = build_scope_filter(plan, registry)
    segments = store.get_by_prefix(scope.normalized_ref_prefix, scope, limit)
    if not segments:
        return _refuse()
    return _ok(f"תוצאות לפרק {plan.scope.chapter}", plan, segments)


def _corpus_quotes(plan: QueryPlan, store, registry: WorkRegistry, limit: int, offset: int) -> PlanResult:
    scope = build_scope_filter(plan, registry)
    total = store.count_segments(scope)
    segments = store.get_segments(scope, limit, offset)
    totals = ScanTotals(scanned=len(segments), limited=total > offset + len(segments))

    rows: List[ResultRow] = []
    hits: List[SegmentRow] = []
    for seg in segments:
        results = detect_quotes_with_links(seg.text_plain, store)
        if not results:
            continue
        hits.append(seg)
        totals.with_candidates += 1
        totals.confirmed += sum(1 for r in results if r.confirmed)
        totals.unconfirmed += sum(1 for r in results if not r.confirmed)
        rows.append(ResultRow(
            ref=format_ref(seg.work, seg.ref),
            text=seg.text_plain,
            work=seg.work,
            quote_results=results,
        ))

    logger.info(
        f"corpus quote scan: work={plan.scope.work} scanned={totals.scanned} "
        f"with_candidates={totals.with_candidates} confirmed={totals.confirmed}"
    )
    if not rows:
        return _refuse()
    citations = deduplicate_citations(hits)
    return PlanOk(
        answer=f"נמצאו {totals.with_candidates} מקורות עם סימני ציטוט",
        rows=rows,
        citations=[display_citation(c) for c in citations],
        totals=totals,
        plan=plan,
    )


def execute_plan(
    plan: QueryPlan,
    query: str,
    store,
    registry: WorkRegistry,
    general_qa=None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> PlanResult:
    """Run ``plan`` and return a PlanResult.

    A disambiguation plan never touches storage. StorageError from the store is
    not caught here.
    """
    if plan.disambiguation is not None:
        return DisambiguationRequired(
            message=plan.disambiguation.reason,
            suggestions=list(plan.disambiguation.suggestions),
        )

    page = limit if limit is not None else plan.limits.max_results
    offset = max(0, offset or 0)
    intent = plan.intent

    if intent == QueryIntent.EXACT_REF:
        result = _exact_ref(plan, store, registry, page)
    elif intent in (QueryIntent.WORD_OCCURRENCES, QueryIntent.QUOTE_ENTITY):
        result = _term_search(plan, store, registry, page, offset)
    elif intent == QueryIntent.LIST_WORKS_MENTIONING_ENTITY:
        result = _list_works(plan, store, registry, page)
    elif intent == QueryIntent.CHAPTER_ABOUT:
        result = _chapter_about(plan, store, registry, page)
    elif intent == QueryIntent.CORPUS_QUOTE_QUERY:
        result = _corpus_quotes(plan, store, registry, page, offset)
    elif intent == QueryIntent.GENERAL_QA:
        if general_qa is None:
            result = _refuse()
        else:
            result = general_qa.answer(query, top_k=page)
            if isinstance(result, PlanOk) and result.plan is None:
                result = result.model_copy(update={"plan": plan})
    else:
        result = Refusal(message=message("REFUSAL_PLANNING_ERROR"))

    rows = len(result.rows or []) if isinstance(result, PlanOk) else 0
    logger.info(f"execute: intent={intent.value} kind={result.kind} rows={rows}")
    return result


__all__ = ["execute_plan", "build_scope_filter"]
