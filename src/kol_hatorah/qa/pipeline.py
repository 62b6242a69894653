"""Retrieval-only answering for open-ended questions.

Contract:
- retrieve(query, k) -> ranked hits from the TF-IDF index
- should_answer(scores) -> enough evidence per RAG_MIN_SOURCES / RAG_MIN_SCORE
- answer(query) -> PlanOk with sources and citations, or a Refusal
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from kol_hatorah import config
from kol_hatorah.citations import deduplicate_citations, display_citation, format_citations
from kol_hatorah.planner.messages import message
from kol_hatorah.planner.types import PlanOk, PlanResult, Refusal, ResultRow
from kol_hatorah.qa.index import load_qa_index
from kol_hatorah.refs import format_ref
from kol_hatorah.text import normalize_text

logger = logging.getLogger(__name__)


def should_answer(scores: List[float], min_sources: Optional[int] = None, min_score: Optional[float] = None) -> bool:
    """At least ``min_sources`` hits, and when ``min_score`` is set none of those below it."""
    min_sources = config.RAG_MIN_SOURCES if min_sources is None else min_sources
    min_score = config.RAG_MIN_SCORE if min_score is None else min_score
    if len(scores) < min_sources:
        return False
    if min_score is not None and any(s < min_score for s in scores[:min_sources]):
        return False
    return True


class GeneralQA:
    def __init__(self, index: Dict[str, Any]):
        self.vectorizer = index["vectorizer"]
        self.matrix = index["matrix"]
        self.meta = index["meta"]

    @classmethod
    def from_path(cls, path: str) -> "GeneralQA":
        return cls(load_qa_index(path))

    def retrieve(self, query: str, k: int = 8) -> List[Dict[str, Any]]:
        norm = normalize_text(query).norm
        if not norm:
            return []
        query_vector = self.vectorizer.transform([norm])
        scores = (self.matrix @ query_vector.T).toarray().ravel()
        top_indices = np.argsort(-scores)[:k]

        hits = []
        for idx in top_indices:
            if idx < len(self.meta) and scores[idx] > 0:
                hit = dict(self.meta[idx])
                hit["score"] = float(scores[idx])
                hit["rank"] = len(hits) + 1
                hits.append(hit)
        return hits

    def answer(self, query: str, top_k: Optional[int] = None) -> PlanResult:
        hits = self.retrieve(query, k=top_k or config.GENERAL_QA_TOP_K)
        scores = [h["score"] for h in hits]
        if not should_answer(scores):
            logger.info(f"general QA refused: {len(hits)} hits, top score {scores[0] if scores else 0:.3f}")
            return Refusal(message=message("REFUSAL_INSUFFICIENT"))

        citations = deduplicate_citations(hits)
        best = hits[0]
        answer = (
            f"נמצאו {len(hits)} מקורות רלוונטיים. "
            f"המקור הקרוב ביותר: {format_ref(best['work'], best['ref'])} (ציון {best['score']:.2f})"
        )
        return PlanOk(
            answer=answer,
            rows=[ResultRow(ref=format_ref(h["work"], h["ref"]), text=h["text"], work=h["work"]) for h in hits],
            citations=[display_citation(c) for c in citations],
            formatted_citations=format_citations(citations),
        )


__all__ = ["GeneralQA", "should_answer"]
