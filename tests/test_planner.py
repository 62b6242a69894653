import pytest
from pydantic import ValidationError

from kol_hatorah import config
from kol_hatorah.planner import (
    RULES,
    ExecutionStrategy,
    QueryIntent,
    ScopeConstraint,
    ScopeNode,
    ScopeNodeType,
    plan_query,
)
from kol_hatorah.planner.messages import CORPUS_QUOTE_SUGGESTIONS, LIST_WORKS_SUGGESTIONS, message


def test_rule_order():
    assert [r.name for r in RULES] == [
        "EXACT_REF",
        "WORD_OCCURRENCES",
        "CHAPTER_ABOUT",
        "QUOTE_ENTITY",
        "LIST_WORKS_MENTIONING_ENTITY",
        "CORPUS_QUOTE_QUERY",
    ]


def test_plan_is_immutable(registry):
    plan = plan_query("בראשית 1:1", registry)
    with pytest.raises(ValidationError):
        plan.term = "x"


def test_chapter_requires_work():
    with pytest.raises(ValidationError):
        ScopeConstraint(chapter=3)


class TestExactRef:
    @pytest.mark.parametrize("query,normalized", [
        ("בראשית 1:1", "Genesis 1:1"),
        ("מה כתוב בבראשית 1:3?", "Genesis 1:3"),
        ("שיר השירים 2:1", "Song of Songs 2:1"),
        ("מלכים א 3:5", "I Kings 3:5"),
        ("ברכות 3:1", "Berakhot 3:1"),
    ])
    def test_resolves_work(self, registry, query, normalized):
        plan = plan_query(query, registry)
        assert plan.intent == QueryIntent.EXACT_REF
        assert plan.ref.normalized_ref == normalized
        assert plan.strategy == ExecutionStrategy.SQL_ONLY
        assert plan.limits.max_results == config.EXACT_REF_MAX_RESULTS
        assert not plan.requires_disambiguation

    def test_latin_work_name_gets_hebrew_only_note(self, registry):
        plan = plan_query("Genesis 1:1", registry)
        assert plan.ref.normalized_ref == "Genesis 1:1"
        assert message("HEBREW_ONLY") in plan.debug.notes

    def test_unknown_work_asks_for_clarification(self, registry):
        plan = plan_query("פלוני 1:1", registry)
        assert plan.requires_disambiguation
        assert plan.disambiguation.reason == message("DISAMBIG_BOOK_OR_MASEKHET")
        assert len(plan.disambiguation.suggestions) == 3
        assert plan.ref is None


class TestWordOccurrences:
    @pytest.mark.parametrize("query", [
        'איפה מופיעה המילה "אור" בנביאים',
        "איפה מופיעה המילה ״אור״ בנביאים",
        "איפה מופיעה המילה “אור” בנביאים",
        "איפה מופיעה המילה ‘אור’ בנביאים",
        "איפה מופיעה המילה ׳אור׳ בנביאים",
    ])
    def test_quote_glyph_variants(self, registry, query):
        plan = plan_query(query, registry)
        assert plan.intent == QueryIntent.WORD_OCCURRENCES
        assert plan.term == "אור"
        assert plan.scope.node == ScopeNode(type=ScopeNodeType.SUBCORPUS, name="נביאים")
        assert plan.limits.max_results == config.WORD_OCCURRENCES_MAX_RESULTS

    def test_unquoted_term_after_trigger(self, registry):
        plan = plan_query("היכן מופיע הביטוי אור בתורה", registry)
        assert plan.term == "אור"
        assert plan.scope.node.name == "תורה"

    def test_whole_corpus_when_no_scope(self, registry):
        plan = plan_query('איפה מופיעה המילה "אור"', registry)
        assert plan.scope == ScopeConstraint()

    def test_tanakh_corpus_scope(self, registry):
        plan = plan_query('איפה מופיעה המילה "אור" בתנ"ך', registry)
        assert plan.scope.node == ScopeNode(type=ScopeNodeType.CORPUS, name="tanakh")

    @pytest.mark.parametrize("query,term", [
        ('היכן כתוב בתנ"ך "אור"', "אור"),
        ('איפה מופיע בתנ"ך הביטוי "יהי אור"', "יהי אור"),
    ])
    def test_gershayim_before_quoted_term(self, registry, query, term):
        plan = plan_query(query, registry)
        assert plan.term == term
        assert plan.scope.node == ScopeNode(type=ScopeNodeType.CORPUS, name="tanakh")

    def test_all_occurrences_of_word(self, registry):
        plan = plan_query("הבא את כל המופעים של המילה אור", registry)
        assert plan.intent == QueryIntent.WORD_OCCURRENCES
        assert plan.term == "אור"

    def test_work_and_chapter(self, registry):
        plan = plan_query('איפה מופיעה המילה "אור" בבראשית פרק 1', registry)
        assert plan.scope.work == "Genesis"
        assert plan.scope.chapter == 1
        assert not plan.requires_disambiguation

    def test_work_beats_division(self, registry):
        plan = plan_query('איפה מופיעה המילה "אור" בנביאים בספר ישעיה פרק 60', registry)
        assert plan.scope.work == "Isaiah"
        assert plan.scope.chapter == 60

    def test_chapter_without_work(self, registry):
        plan = plan_query('איפה מופיעה המילה "אור" בפרק 3', registry)
        assert plan.requires_disambiguation
        assert plan.disambiguation.reason == message("DISAMBIG_CHAPTER_NEEDS_WORK")
        assert plan.scope.chapter is None
        assert plan.term == "אור"

    def test_unquoted_chapter_without_work(self, registry):
        plan = plan_query("איפה מופיעה המילה אור בפרק 3", registry)
        assert plan.requires_disambiguation
        assert plan.term == "אור"

    def test_missing_term(self, registry):
        plan = plan_query("איפה מופיעה המילה", registry)
        assert plan.disambiguation.reason == message("DISAMBIG_MISSING_TERM")
        assert plan.term is None


class TestChapterAbout:
    @pytest.mark.parametrize("query,work", [
        ("על מה מדבר פרק 3 בברכות?", "Berakhot"),
        ("על מה מדבר פרק 60 בספר ישעיה", "Isaiah"),
        ("מה הנושא של פרק 5 במסכת סוטה", "Sotah"),
    ])
    def test_resolves(self, registry, query, work):
        plan = plan_query(query, registry)
        assert plan.intent == QueryIntent.CHAPTER_ABOUT
        assert plan.scope.work == work
        assert plan.strategy == ExecutionStrategy.HYBRID_SQL_THEN_LLM
        assert plan.limits.max_segments_for_synthesis == config.CHAPTER_ABOUT_MAX_SEGMENTS

    def test_unknown_work(self, registry):
        plan = plan_query("על מה מדבר פרק 3 בפלוני", registry)
        assert plan.disambiguation.reason == message("DISAMBIG_CHAPTER_WORK")


class TestQuoteEntity:
    def test_tractate_scope(self, registry):
        plan = plan_query("משניות שמזכירות את רבי עקיבא במסכת סוטה", registry)
        assert plan.intent == QueryIntent.QUOTE_ENTITY
        assert plan.term == "רבי עקיבא"
        assert plan.scope.work == "Sotah"
        assert plan.scope.node == ScopeNode(type=ScopeNodeType.CORPUS, name="mishnah")

    def test_seder_scope(self, registry):
        plan = plan_query("משניות שמזכירות את רבי עקיבא בסדר נשים", registry)
        assert plan.scope.node == ScopeNode(type=ScopeNodeType.SUBCORPUS, name="נשים")
        assert plan.scope.work is None

    def test_default_is_all_mishnah(self, registry):
        plan = plan_query("משניות שמזכירות את הלל", registry)
        assert plan.term == "הלל"
        assert plan.scope.node.name == "mishnah"

    def test_unknown_tractate(self, registry):
        plan = plan_query("משניות שמזכירות את רבי עקיבא במסכת פלונית", registry)
        assert plan.disambiguation.reason == message("DISAMBIG_BOOK_OR_MASEKHET")

    @pytest.mark.parametrize("query", ["משניות שמזכירות במסכת", "משניות שמזכירות במסכת סוטה"])
    def test_scope_without_entity(self, registry, query):
        plan = plan_query(query, registry)
        assert plan.term is None
        assert plan.disambiguation.reason == message("DISAMBIG_MISSING_TERM")


class TestListWorks:
    def test_collection_required(self, registry):
        plan = plan_query("איזה מסכתות מזכירות את רבי עקיבא?", registry)
        assert plan.intent == QueryIntent.LIST_WORKS_MENTIONING_ENTITY
        assert plan.aggregate_works
        assert plan.disambiguation.reason == message("DISAMBIG_TRACTATES_WHICH_CORPUS")
        assert plan.disambiguation.suggestions == LIST_WORKS_SUGGESTIONS

    @pytest.mark.parametrize("query,collection", [
        ("איזה מסכתות במשנה מזכירות את רבי עקיבא?", "mishnah"),
        ("איזה מסכתות בבבלי מזכירות את רבי עקיבא?", "bavli"),
    ])
    def test_named_collection(self, registry, query, collection):
        plan = plan_query(query, registry)
        assert plan.term == "רבי עקיבא"
        assert plan.scope.node == ScopeNode(type=ScopeNodeType.CORPUS, name=collection)
        assert not plan.requires_disambiguation


class TestCorpusQuote:
    @pytest.mark.parametrize("query", [
        'תן לי את כל המשניות במסכת סוטה שמצטטים פסוק מהתנ"ך',
        "תן לי את כל המשניות במסכת סוטה שמצטטים פסוק מהתנ״ך",
        "משניות בסוטה שמצטטות פסוק מתנך",
    ])
    def test_tractate(self, registry, query):
        plan = plan_query(query, registry)
        assert plan.intent == QueryIntent.CORPUS_QUOTE_QUERY
        assert plan.scope.work == "Sotah"
        assert plan.scope.node == ScopeNode(type=ScopeNodeType.CORPUS, name="mishnah")
        assert plan.limits.max_results == config.CORPUS_QUOTE_MAX_RESULTS

    def test_bavli(self, registry):
        plan = plan_query('אילו סוגיות בבבלי במסכת שבת מצטטות פסוק מתנ"ך', registry)
        assert plan.scope.work == "Shabbat"
        assert plan.scope.node.name == "bavli"

    def test_tractate_required(self, registry):
        plan = plan_query('אילו משניות מצטטות פסוקים מהתנ"ך?', registry)
        assert plan.intent == QueryIntent.CORPUS_QUOTE_QUERY
        assert plan.disambiguation.suggestions == CORPUS_QUOTE_SUGGESTIONS
        assert plan.limits.max_results == config.CORPUS_QUOTE_DISAMBIG_MAX_RESULTS

    def test_tanakh_book_is_not_a_tractate(self, registry):
        plan = plan_query('משניות בבראשית שמצטטות פסוק מהתנ"ך', registry)
        assert plan.requires_disambiguation


class TestGeneralQA:
    def test_fallback(self, registry):
        plan = plan_query("מה המשמעות של אהבת הבריות", registry)
        assert plan.intent == QueryIntent.GENERAL_QA
        assert plan.strategy == ExecutionStrategy.VECTOR_ONLY
        assert plan.limits.max_results == config.GENERAL_QA_TOP_K
        assert plan.debug.matched_rule == "GENERAL_QA"
        assert plan.debug.notes == []

    def test_mixed_script_note(self, registry):
        plan = plan_query("מה זה Torah", registry)
        assert plan.debug.notes == [message("HEBREW_PREFERRED_NOTE")]

    def test_latin_only_note(self, registry):
        plan = plan_query("what is love", registry)
        assert plan.debug.notes == [message("HEBREW_ONLY")]

    def test_custom_rules(self, registry):
        plan = plan_query("בראשית 1:1", registry, rules=[])
        assert plan.intent == QueryIntent.GENERAL_QA

    def test_empty_query(self, registry):
        assert plan_query("   ", registry).intent == QueryIntent.GENERAL_QA
