from kol_hatorah.text import (
    expand_hebrew_prefixes,
    has_hebrew,
    has_latin,
    normalize_query_input,
    normalize_text,
    snippet_around,
    tokenize,
)


def test_markup_and_entities_removed_from_plain():
    out = normalize_text("<b>שָׁלוֹם</b>&nbsp;עוֹלָם")
    assert out.plain == "שָׁלוֹם עוֹלָם"
    assert out.norm == "שלומ עולמ"


def test_niqqud_and_cantillation_stripped():
    out = normalize_text("בְּרֵאשִׁ֖ית בָּרָ֣א אֱלֹהִ֑ים׃")
    assert out.norm == "בראשית ברא אלהימ"


def test_maqaf_separates_words():
    assert normalize_text("כָּל־הַתּוֹרָה").norm == "כל התורה"


def test_final_letters_folded():
    assert normalize_text("ארץ שלום מלך אף ענן").norm == "ארצ שלומ מלכ אפ עננ"


def test_empty_input():
    assert normalize_text(None).norm == ""
    assert normalize_text("").plain == ""


def test_tokenize_drops_punctuation():
    assert tokenize("ויאמר אלהים, יהי אור!") == ["ויאמר", "אלהימ", "יהי", "אור"]


def test_prefix_expansion_order():
    assert expand_hebrew_prefixes("אור") == ["אור", "ואור", "באור", "כאור", "לאור", "מאור", "האור"]


class TestQueryInput:
    def test_gershayim_folded_to_ascii(self):
        assert normalize_query_input("איפה מופיעה המילה ״אור״   בנביאים") == 'איפה מופיעה המילה "אור" בנביאים'

    def test_curly_quotes_folded(self):
        assert normalize_query_input("המילה “אור”") == 'המילה "אור"'
        assert normalize_query_input("המילה ‘אור’") == "המילה 'אור'"

    def test_unmatched_trailing_quote_dropped(self):
        assert normalize_query_input('שלום"') == "שלום"

    def test_matched_quotes_kept(self):
        assert normalize_query_input('"שלום"') == '"שלום"'

    def test_gershayim_is_not_a_delimiter(self):
        assert normalize_query_input('היכן כתוב בתנ״ך ״אור״') == 'היכן כתוב בתנ"ך "אור"'

    def test_newlines_squeezed(self):
        assert normalize_query_input("א\n\tב") == "א ב"

    def test_none(self):
        assert normalize_query_input(None) == ""


def test_script_detection():
    assert has_hebrew("שלום") and not has_latin("שלום")
    assert has_latin("Genesis") and not has_hebrew("Genesis")


def test_snippet_around():
    text = "א" * 100 + "אור" + "ב" * 100
    snippet = snippet_around(text, "אור", width=20)
    assert len(snippet) == 20
    assert "אור" in snippet
    assert snippet_around("קצר", "חסר", width=2) == "קצ"
