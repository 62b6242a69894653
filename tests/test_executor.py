import pytest

from kol_hatorah.planner import (
    DisambiguationRequired,
    PlanOk,
    QueryIntent,
    Refusal,
    WorkRegistry,
    build_scope_filter,
    execute_plan,
    plan_query,
)
from kol_hatorah.planner.messages import message
from kol_hatorah.qa import GeneralQA
from kol_hatorah.storage import ScopeFilter, Segment, StorageError, open_store


def _run(query, store, registry, **kwargs):
    plan = plan_query(query, registry)
    return plan, execute_plan(plan, query, store, registry, **kwargs)


class TestScopeFilter:
    def test_subcorpus_expands_to_work_list(self, registry):
        plan = plan_query('איפה מופיעה המילה "אור" בנביאים', registry)
        assert build_scope_filter(plan, registry) == ScopeFilter(type="tanakh", work_in=["Isaiah"])

    def test_chapter_becomes_ref_prefix(self, registry):
        plan = plan_query("על מה מדבר פרק 3 בברכות", registry)
        scope = build_scope_filter(plan, registry)
        assert scope.type == "mishnah"
        assert scope.work == "Berakhot"
        assert scope.normalized_ref_prefix == "Berakhot 3:"

    def test_corpus_node_pins_collection(self, registry):
        plan = plan_query('אילו סוגיות בבבלי במסכת ברכות מצטטות פסוק מתנ"ך', registry)
        assert build_scope_filter(plan, registry) == ScopeFilter(type="bavli", work="Berakhot")


def test_disambiguation_never_touches_storage(registry):
    plan = plan_query('איפה מופיעה המילה "אור" בפרק 3', registry)
    result = execute_plan(plan, "", None, registry)
    assert isinstance(result, DisambiguationRequired)
    assert result.message == plan.disambiguation.reason
    assert result.suggestions == plan.disambiguation.suggestions


class TestExactRef:
    def test_found(self, store, registry):
        _, result = _run("בראשית 1:1", store, registry)
        assert isinstance(result, PlanOk)
        assert [r.ref for r in result.rows] == ["בראשית 1:1"]
        assert result.citations == ["Genesis 1:1"]
        assert result.plan.intent == QueryIntent.EXACT_REF

    def test_missing_verse_refused(self, store, registry):
        _, result = _run("בראשית 50:1", store, registry)
        assert isinstance(result, Refusal)
        assert result.message == message("REFUSAL_INSUFFICIENT")

    def test_prefix_fallback_does_not_cross_verse_numbers(self, tmp_path):
        segs = [
            Segment(id="a", type="tanakh", work="Genesis", ref="Genesis 1:1-2",
                    normalized_ref="Genesis 1:1-2", text="בראשית ברא אלהים"),
            Segment(id="b", type="tanakh", work="Genesis", ref="Genesis 1:10",
                    normalized_ref="Genesis 1:10", text="ויקרא אלהים ליבשה ארץ"),
        ]
        with open_store(str(tmp_path / "ranges.sqlite")) as s:
            s.insert_segments(segs)
            reg = WorkRegistry.from_store(s)
            _, result = _run("בראשית 1:1", s, reg)
        assert [r.ref for r in result.rows] == ["בראשית 1:1-2"]


class TestWordOccurrences:
    def test_division(self, store, registry):
        _, result = _run('איפה מופיעה המילה "אור" בנביאים', store, registry)
        assert result.totals.scanned == 2
        assert not result.totals.limited
        assert [r.ref for r in result.rows] == ["ישעיה 2:5", "ישעיה 60:1"]

    def test_prefixed_forms_match(self, store, registry):
        _, result = _run('איפה מופיעה המילה "אור"', store, registry)
        assert result.totals.scanned == 5
        refs = [r.ref for r in result.rows]
        assert "בראשית 1:4" in refs
        assert "תהלים 119:105" in refs

    def test_pagination(self, store, registry):
        _, first = _run('איפה מופיעה המילה "אור"', store, registry, limit=2)
        _, last = _run('איפה מופיעה המילה "אור"', store, registry, limit=2, offset=4)
        assert len(first.rows) == 2
        assert first.totals.scanned == 5
        assert first.totals.limited
        assert len(last.rows) == 1
        assert not last.totals.limited

    def test_chapter_scope(self, store, registry):
        _, result = _run('איפה מופיעה המילה "אלהים" בבראשית פרק 1', store, registry)
        refs = [r.ref for r in result.rows]
        assert "בראשית 1:10" in refs
        assert all(r.work == "Genesis" for r in result.rows)

    def test_empty_division_refused(self, store):
        registry = WorkRegistry({"mishnah": ["Berakhot"]})
        _, result = _run('איפה מופיעה המילה "אור" בנביאים', store, registry)
        assert isinstance(result, Refusal)

    def test_no_hits_refused(self, store, registry):
        _, result = _run('איפה מופיעה המילה "זרזיר" בתורה', store, registry)
        assert isinstance(result, Refusal)

    @pytest.mark.parametrize("query", [
        'היכן כתוב בתנ"ך "אור"',
        "היכן כתוב בתנ״ך ״אור״",
        "הבא את כל המופעים של המילה אור",
    ])
    def test_searches_the_requested_word(self, store, registry, query):
        plan, result = _run(query, store, registry)
        assert plan.term == "אור"
        assert result.totals.scanned == 5
        assert all("אור" in r.text for r in result.rows)


class TestEntities:
    def test_quote_entity_in_tractate(self, store, registry):
        _, result = _run("משניות שמזכירות את רבי עקיבא במסכת סוטה", store, registry)
        assert [r.ref for r in result.rows] == ["סוטה 5:1", "סוטה 5:2"]

    def test_quote_entity_in_seder(self, store, registry):
        _, result = _run("משניות שמזכירות את רבי עקיבא בסדר נשים", store, registry)
        assert {r.work for r in result.rows} == {"Sotah", "Yevamot"}

    def test_list_works_mishnah(self, store, registry):
        _, result = _run("איזה מסכתות במשנה מזכירות את רבי עקיבא?", store, registry)
        assert [(w.work, w.count) for w in result.works] == [("Sotah", 2), ("Yevamot", 1)]
        assert result.rows is None

    def test_list_works_bavli_refused(self, store, registry):
        _, result = _run("איזה מסכתות בבבלי מזכירות את רבי עקיבא?", store, registry)
        assert isinstance(result, Refusal)


def test_chapter_about(store, registry):
    _, result = _run("על מה מדבר פרק 5 בסוטה", store, registry)
    assert result.answer == "תוצאות לפרק 5"
    assert len(result.rows) == 3


class TestCorpusQuotes:
    def test_tractate_scan(self, store, registry):
        _, result = _run('תן לי את כל המשניות במסכת סוטה שמצטטים פסוק מהתנ"ך', store, registry)
        totals = result.totals
        assert (totals.scanned, totals.with_candidates, totals.confirmed, totals.unconfirmed) == (3, 3, 2, 1)
        assert not totals.limited
        by_ref = {r.ref: r for r in result.rows}
        assert by_ref["סוטה 5:1"].quote_results[0].links[0].tanakh_ref == "Leviticus 19:18"
        assert by_ref["סוטה 5:2"].quote_results[0].links[0].tanakh_ref == "Deuteronomy 6:7"
        assert not by_ref["סוטה 5:3"].quote_results[0].confirmed

    def test_unconfirmed_only(self, store, registry):
        _, result = _run('תן לי את כל המשניות במסכת ברכות שמצטטים פסוק מהתנ"ך', store, registry)
        assert result.totals.confirmed == 0
        assert result.totals.unconfirmed == 1
        assert [r.ref for r in result.rows] == ["ברכות 1:3"]

    def test_limited_scan(self, store, registry):
        _, result = _run('תן לי את כל המשניות במסכת סוטה שמצטטים פסוק מהתנ"ך', store, registry, limit=1)
        assert result.totals.scanned == 1
        assert result.totals.limited

    def test_no_candidates_refused(self, store, registry):
        _, result = _run('משניות בפאה שמצטטות פסוק מהתנ"ך', store, registry)
        assert isinstance(result, Refusal)


class TestGeneralQA:
    def test_without_index_refuses(self, store, registry):
        _, result = _run("מה המשמעות של אהבת הבריות", store, registry)
        assert isinstance(result, Refusal)

    def test_with_index(self, store, registry, qa_index_path):
        qa = GeneralQA.from_path(qa_index_path)
        plan, result = _run("ויאמר אלהים יהי אור", store, registry, general_qa=qa)
        assert plan.intent == QueryIntent.GENERAL_QA
        assert isinstance(result, PlanOk)
        assert result.plan == plan
        assert "בראשית 1:3" in [r.ref for r in result.rows]


class _BrokenStore:
    def find_term(self, *args, **kwargs):
        raise StorageError("disk gone")


def test_storage_errors_propagate(registry):
    plan = plan_query('איפה מופיעה המילה "אור"', registry)
    with pytest.raises(StorageError):
        execute_plan(plan, "", _BrokenStore(), registry)
