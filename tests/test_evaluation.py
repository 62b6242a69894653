import json

import pytest
from pydantic import ValidationError

from kol_hatorah.evaluation import EvalQuery, ask_once, evaluate_queries, load_queries
from kol_hatorah.planner import QueryIntent


def test_load_queries(tmp_path):
    path = tmp_path / "queries.json"
    path.write_text(json.dumps([
        {"q": "בראשית 1:1", "expectedRefs": ["Genesis 1:1"]},
        {"q": "בראשית 50:1", "shouldRefuse": True},
    ], ensure_ascii=False), encoding="utf-8")
    queries = load_queries(str(path))
    assert queries[0].expected_refs == ["Genesis 1:1"]
    assert not queries[0].should_refuse
    assert queries[1].should_refuse


def test_load_queries_rejects_non_list(tmp_path):
    path = tmp_path / "queries.json"
    path.write_text('{"q": "x"}', encoding="utf-8")
    with pytest.raises(ValueError):
        load_queries(str(path))


def test_empty_query_rejected():
    with pytest.raises(ValidationError):
        EvalQuery(q="")


def test_report(store, registry):
    queries = [
        EvalQuery(q="בראשית 1:1", expectedRefs=["Genesis 1:1"]),
        EvalQuery(q="בראשית 1:1", expectedRefs=["Genesis 1:2"]),
        EvalQuery(q="בראשית 50:1", shouldRefuse=True),
        EvalQuery(q="ויקרא 19:18", shouldRefuse=True),
    ]
    report = evaluate_queries(queries, store, registry)
    assert report["count"] == 4
    assert report["passed"] == 2
    found, missed, refused, answered = report["results"]
    assert found["passed"] and found["matched_refs"] == ["Genesis 1:1"]
    assert found["intent"] == "EXACT_REF"
    assert "בראשית א׳:א׳" in found["answer"]
    assert not missed["passed"] and missed["matched_refs"] == []
    assert refused["passed"] and refused["kind"] == "REFUSAL"
    assert not answered["passed"] and not answered["refused"]


class TestAskOnce:
    def test_loader_skipped_for_lexical_plans(self, store, registry):
        def fail():
            raise AssertionError("general QA loaded for a lexical plan")

        plan, result, limit = ask_once('איפה מופיעה המילה "אור" בנביאים', store, registry, load_general_qa=fail)
        assert plan.intent == QueryIntent.WORD_OCCURRENCES
        assert limit == plan.limits.max_results
        assert result.kind == "OK"

    def test_loader_used_for_general_questions(self, store, registry):
        calls = []

        def load():
            calls.append(1)
            return None

        plan, result, _ = ask_once("מה דעתך על מזג האוויר", store, registry, load_general_qa=load)
        assert plan.intent == QueryIntent.GENERAL_QA
        assert calls == [1]
        assert result.kind == "REFUSAL"
