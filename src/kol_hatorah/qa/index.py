import logging
import os
import pickle
from typing import Any, Dict, List

import dill
from sklearn.feature_extraction.text import TfidfVectorizer

from kol_hatorah.text import normalize_text

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("vectorizer", "matrix", "meta")
PAGE_SIZE = 1000


class QAIndexError(RuntimeError):
    """General-QA index file is missing or malformed."""


def iter_store_segments(store, page_size: int = PAGE_SIZE):
    offset = 0
    while True:
        page = store.get_segments(None, page_size, offset)
        if not page:
            break
        yield from page
        offset += len(page)


def build_qa_index(store, out_path: str, max_features: int = 200000, ngram_max: int = 4) -> str:
    """Fit a TF-IDF index over every segment in ``store`` and dump it with dill.

    Character n-grams inside word boundaries absorb Hebrew inseparable prefixes
    (ו, ב, ל...) that would otherwise split one word into many vocabulary entries.
    """
    meta: List[Dict[str, Any]] = []
    corpus: List[str] = []
    for seg in iter_store_segments(store):
        norm = normalize_text(seg.text_plain).norm
        if not norm:
            continue
        corpus.append(norm)
        meta.append({
            "id": seg.id,
            "type": seg.type,
            "work": seg.work,
            "ref": seg.ref,
            "text": seg.text_plain,
        })
    if not corpus:
        raise QAIndexError("Cannot build a QA index from an empty store")

    vectorizer = TfidfVectorizer(
        analyzer="char_wb",
        ngram_range=(2, ngram_max),
        max_features=max_features,
        sublinear_tf=True,
    )
    matrix = vectorizer.fit_transform(corpus)

    index_data = {"vectorizer": vectorizer, "matrix": matrix, "meta": meta}
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(out_path, "wb") as f:
        dill.dump(index_data, f)

    logger.info(f"QA index written to {out_path} ({len(meta)} segments)")
    return out_path


def load_qa_index(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise QAIndexError(f"QA index not found at {path}")
    try:
        with open(path, "rb") as f:
            data = dill.load(f)
    except (OSError, EOFError, pickle.UnpicklingError) as e:
        raise QAIndexError(f"QA index at {path} is unreadable: {e}") from e
    if not isinstance(data, dict) or any(k not in data for k in REQUIRED_KEYS):
        raise QAIndexError(f"QA index at {path} is missing one of {REQUIRED_KEYS}")
    return data
