import pytest

from kol_hatorah.planner import PlanOk, Refusal
from kol_hatorah.qa import GeneralQA, QAIndexError, build_qa_index, load_qa_index, should_answer
from kol_hatorah.storage import open_store


@pytest.mark.parametrize("scores,min_sources,min_score,expected", [
    ([0.9], 2, None, False),
    ([0.5, 0.4], 2, 0.45, False),
    ([0.5, 0.5], 2, 0.45, True),
    ([0.1, 0.1], 2, None, True),
    ([], 0, None, True),
])
def test_should_answer(scores, min_sources, min_score, expected):
    assert should_answer(scores, min_sources=min_sources, min_score=min_score) is expected


def test_index_contents(qa_index_path):
    data = load_qa_index(qa_index_path)
    assert data["matrix"].shape[0] == len(data["meta"]) == 21
    assert {"id", "type", "work", "ref", "text"} <= set(data["meta"][0])


def test_retrieve_ranks_exact_verse_first(qa_index_path):
    qa = GeneralQA.from_path(qa_index_path)
    hits = qa.retrieve("ויאמר אלהים יהי אור", k=3)
    assert hits[0]["ref"] == "Genesis 1:3"
    assert [h["rank"] for h in hits] == list(range(1, len(hits) + 1))
    assert hits == sorted(hits, key=lambda h: -h["score"])


def test_answer_with_sources(qa_index_path):
    result = GeneralQA.from_path(qa_index_path).answer("ויאמר אלהים יהי אור")
    assert isinstance(result, PlanOk)
    assert "בראשית 1:3" in result.answer
    assert result.formatted_citations.startswith("[1] Genesis 1:3")


def test_answer_refuses_without_evidence(qa_index_path):
    result = GeneralQA.from_path(qa_index_path).answer("xyzzy plugh")
    assert isinstance(result, Refusal)


def test_missing_index(tmp_path):
    with pytest.raises(QAIndexError):
        load_qa_index(str(tmp_path / "nope.pkl"))


def test_corrupt_index(tmp_path):
    path = tmp_path / "broken.pkl"
    path.write_bytes(b"not a pickle")
    with pytest.raises(QAIndexError):
        load_qa_index(str(path))


def test_empty_store_cannot_be_indexed(tmp_path):
    with open_store(str(tmp_path / "empty.sqlite")) as store:
        with pytest.raises(QAIndexError):
            build_qa_index(store, str(tmp_path / "qa.pkl"))
