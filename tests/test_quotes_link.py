from kol_hatorah.quotes import (
    Confidence,
    QuoteCandidate,
    QuoteMethod,
    QuoteVerdict,
    detect_quotes_with_links,
    link_to_tanakh,
)
from kol_hatorah.text import normalize_text


def _candidate(raw):
    return QuoteCandidate(
        method=QuoteMethod.INTRO_WORD,
        start=0,
        end=len(raw),
        raw_text=raw,
        normalized_text=normalize_text(raw).norm,
        signal="שנאמר",
        confidence=Confidence.HIGH,
    )


def test_sub_quotation_of_long_verse_scores_full(store):
    links = link_to_tanakh(_candidate("ואהבת לרעך כמוך"), store)
    assert len(links) == 1
    link = links[0]
    assert link.tanakh_ref == "Leviticus 19:18"
    assert link.tanakh_id == "tanakh:Leviticus 19:18"
    assert link.score == 1.0
    assert link.shared_words == 3
    assert link.total_words == 3


def test_whole_verse(store):
    links = link_to_tanakh(_candidate("ויאמר אלהים יהי אור ויהי אור"), store)
    assert [link.tanakh_ref for link in links] == ["Genesis 1:3"]


def test_too_few_shared_words(store):
    # both words are in Deuteronomy 6:7 but two words are not enough evidence
    assert link_to_tanakh(_candidate("ובשכבך ובקומך"), store) == []


def test_words_missing_from_tanakh(store):
    assert link_to_tanakh(_candidate("דברים שלא נכתבו בשום מקום"), store) == []


def test_links_are_tanakh_only(store):
    # the same words appear in Mishnah Sotah 5:1
    links = link_to_tanakh(_candidate("ואהבת לרעך כמוך"), store)
    assert all(link.tanakh_id.startswith("tanakh:") for link in links)


def test_detect_without_store_is_unconfirmed():
    results = detect_quotes_with_links("רבי עקיבא אומר שנאמר ואהבת לרעך כמוך.")
    assert len(results) == 1
    assert results[0].verdict == QuoteVerdict.UNCONFIRMED
    assert results[0].links == []
    assert not results[0].confirmed


def test_detect_with_store(store):
    results = detect_quotes_with_links('דרש רבי עקיבא "ושננתם לבניך ודברת בם" בשעה שאדם לומד תורה', store)
    assert len(results) == 1
    r = results[0]
    assert r.confirmed
    assert r.candidate.confidence == Confidence.MEDIUM
    assert r.links[0].tanakh_ref == "Deuteronomy 6:7"
    assert r.links[0].score == 1.0
