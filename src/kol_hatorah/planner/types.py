"""Planner data model.

A QueryPlan is built once per query by plan_query() and consumed once by
execute_plan(), which answers with one of the PlanResult variants.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from kol_hatorah.quotes.models import QuoteDetectionResult


class QueryIntent(str, Enum):
    EXACT_REF = "EXACT_REF"
    WORD_OCCURRENCES = "WORD_OCCURRENCES"
    CHAPTER_ABOUT = "CHAPTER_ABOUT"
    QUOTE_ENTITY = "QUOTE_ENTITY"
    LIST_WORKS_MENTIONING_ENTITY = "LIST_WORKS_MENTIONING_ENTITY"
    CORPUS_QUOTE_QUERY = "CORPUS_QUOTE_QUERY"
    GENERAL_QA = "GENERAL_QA"


class ScopeNodeType(str, Enum):
    CORPUS = "CORPUS"
    SUBCORPUS = "SUBCORPUS"
    WORK = "WORK"


class ExecutionStrategy(str, Enum):
    SQL_ONLY = "SQL_ONLY"
    VECTOR_ONLY = "VECTOR_ONLY"
    HYBRID_SQL_THEN_LLM = "HYBRID_SQL_THEN_LLM"


class ScopeNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ScopeNodeType
    name: str


class ScopeConstraint(BaseModel):
    """Corpus subset a query is restricted to. A chapter requires a work."""

    model_config = ConfigDict(frozen=True)

    node: Optional[ScopeNode] = None
    work: Optional[str] = None
    chapter: Optional[int] = None

    @model_validator(mode="after")
    def _chapter_needs_work(self) -> "ScopeConstraint":
        if self.chapter is not None and not self.work:
            raise ValueError("chapter scope requires a work")
        return self


class ParsedRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str
    normalized_ref: str
    work: str
    chapter: int
    verse: int


class ResultLimits(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_results: int
    max_segments_for_synthesis: int = 0


class Disambiguation(BaseModel):
    model_config = ConfigDict(frozen=True)

    required: Literal[True] = True
    reason: str
    suggestions: List[str] = Field(min_length=1)


class PlanDebug(BaseModel):
    model_config = ConfigDict(frozen=True)

    matched_rule: str
    notes: List[str] = Field(default_factory=list)


class QueryPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    intent: QueryIntent
    scope: ScopeConstraint = Field(default_factory=ScopeConstraint)
    ref: Optional[ParsedRef] = None
    term: Optional[str] = None
    strategy: ExecutionStrategy
    limits: ResultLimits
    disambiguation: Optional[Disambiguation] = None
    aggregate_works: bool = False
    debug: PlanDebug

    @property
    def requires_disambiguation(self) -> bool:
        return self.disambiguation is not None


class ResultRow(BaseModel):
    ref: str
    text: str
    work: Optional[str] = None
    quote_results: Optional[List[QuoteDetectionResult]] = None


class WorkHit(BaseModel):
    work: str
    count: Optional[int] = None


class ScanTotals(BaseModel):
    scanned: int = 0
    with_candidates: int = 0
    confirmed: int = 0
    unconfirmed: int = 0
    limited: bool = False


class DisambiguationRequired(BaseModel):
    kind: Literal["DISAMBIGUATION_REQUIRED"] = "DISAMBIGUATION_REQUIRED"
    message: str
    suggestions: List[str]


class Refusal(BaseModel):
    kind: Literal["REFUSAL"] = "REFUSAL"
    message: str


class PlanOk(BaseModel):
    kind: Literal["OK"] = "OK"
    answer: str
    rows: Optional[List[ResultRow]] = None
    citations: Optional[List[str]] = None
    formatted_citations: Optional[str] = None
    works: Optional[List[WorkHit]] = None
    totals: Optional[ScanTotals] = None
    plan: Optional[QueryPlan] = None


PlanResult = Annotated[Union[DisambiguationRequired, Refusal, PlanOk], Field(discriminator="kind")]


__all__ = [
    "QueryIntent",
    "ScopeNodeType",
    "ExecutionStrategy",
    "ScopeNode",
    "ScopeConstraint",
    "ParsedRef",
    "ResultLimits",
    "Disambiguation",
    "PlanDebug",
    "QueryPlan",
    "ResultRow",
    "WorkHit",
    "ScanTotals",
    "DisambiguationRequired",
    "Refusal",
    "PlanOk",
    "PlanResult",
]
