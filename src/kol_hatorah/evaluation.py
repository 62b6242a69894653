"""
Batch evaluation of questions against expected references.

A query file is a JSON list of objects:

    [{"q": "בראשית 1:1", "expectedRefs": ["Genesis 1:1"]},
     {"q": "מה דעתך על מזג האוויר?", "shouldRefuse": true}]

Each query runs through plan, execute and render exactly as the CLI does; the
report records the outcome, the matched references and the latency.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

from kol_hatorah.planner import (
    PlanResult,
    QueryIntent,
    QueryPlan,
    WorkRegistry,
    execute_plan,
    plan_query,
    render_answer,
)
from kol_hatorah.text import normalize_query_input

logger = logging.getLogger(__name__)

PAGINATED_INTENTS = (QueryIntent.WORD_OCCURRENCES, QueryIntent.CORPUS_QUOTE_QUERY)


class Answer(NamedTuple):
    plan: QueryPlan
    result: PlanResult
    limit: Optional[int]


class EvalQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    q: str = Field(min_length=1)
    expected_refs: List[str] = Field(default_factory=list, alias="expectedRefs")
    should_refuse: bool = Field(default=False, alias="shouldRefuse")


class EvalOutcome(BaseModel):
    query: str
    intent: QueryIntent
    kind: str
    expected_refs: List[str]
    should_refuse: bool
    refused: bool
    answer: str
    citations: List[str]
    matched_refs: List[str]
    latency_ms: int
    passed: bool


def ask_once(
    query: str,
    store,
    registry: WorkRegistry,
    general_qa=None,
    limit: Optional[int] = None,
    offset: int = 0,
    load_general_qa: Optional[Callable[[], Any]] = None,
) -> Answer:
    """Plan and execute one normalized query.

    Paginated intents fall back to the plan's own result limit when ``limit``
    is not given. ``load_general_qa`` is only called for GENERAL_QA plans when
    no ``general_qa`` is passed in.
    """
    plan = plan_query(query, registry)
    if plan.intent in PAGINATED_INTENTS and limit is None:
        limit = plan.limits.max_results
    qa = None
    if plan.intent == QueryIntent.GENERAL_QA:
        qa = general_qa
        if qa is None and load_general_qa is not None:
            qa = load_general_qa()
    result = execute_plan(plan, query, store, registry, general_qa=qa, limit=limit, offset=offset)
    return Answer(plan, result, limit)


def load_queries(path: str) -> List[EvalQuery]:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON list of queries")
    return [EvalQuery.model_validate(item) for item in raw]


def evaluate_query(item: EvalQuery, store, registry: WorkRegistry, general_qa=None,
                   limit: Optional[int] = None) -> EvalOutcome:
    started = time.time()
    query = normalize_query_input(item.q)
    plan, result, shown = ask_once(query, store, registry, general_qa=general_qa, limit=limit)
    text = render_answer(plan, result, limit=shown)
    latency_ms = round((time.time() - started) * 1000)

    citations = list(getattr(result, "citations", None) or [])
    cited = set(citations)
    matched = [r for r in item.expected_refs if r in cited]
    refused = result.kind != "OK"
    if item.should_refuse:
        passed = refused
    else:
        passed = not refused and len(matched) == len(item.expected_refs)

    return EvalOutcome(
        query=item.q,
        intent=plan.intent,
        kind=result.kind,
        expected_refs=item.expected_refs,
        should_refuse=item.should_refuse,
        refused=refused,
        answer=text,
        citations=citations,
        matched_refs=matched,
        latency_ms=latency_ms,
        passed=passed,
    )


def evaluate_queries(queries: Iterable[EvalQuery], store, registry: WorkRegistry, general_qa=None,
                     limit: Optional[int] = None) -> Dict[str, Any]:
    results = [evaluate_query(q, store, registry, general_qa=general_qa, limit=limit) for q in queries]
    passed = sum(1 for r in results if r.passed)
    logger.info(f"Evaluated {len(results)} queries, {passed} passed")
    return {
        "count": len(results),
        "passed": passed,
        "results": [r.model_dump(mode="json") for r in results],
    }


__all__ = [
    "Answer",
    "EvalQuery",
    "EvalOutcome",
    "ask_once",
    "load_queries",
    "evaluate_query",
    "evaluate_queries",
]
