import os
import sys
import tempfile

import pytest

# Ensure the `src/` directory is on sys.path so we can import `kol_hatorah` package
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

# Point the service at a throwaway store before any kol_hatorah module reads its config
_TMP_DIR = tempfile.mkdtemp(prefix="kol_hatorah_tests_")
os.environ["SQLITE_PATH"] = os.path.join(_TMP_DIR, "lexical.sqlite")
os.environ["QA_INDEX_PATH"] = os.path.join(_TMP_DIR, "qa_index.pkl")
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["API_KEY"] = ""
os.environ.pop("RAG_MIN_SCORE", None)

from kol_hatorah.planner import WorkRegistry  # noqa: E402
from kol_hatorah.qa import build_qa_index  # noqa: E402
from kol_hatorah.storage import Segment, open_store  # noqa: E402

FIXTURE_SEGMENTS = [
    # Tanakh
    ("tanakh", "Genesis", "Genesis 1:1", "בְּרֵאשִׁ֖ית בָּרָ֣א אֱלֹהִ֑ים אֵ֥ת הַשָּׁמַ֖יִם וְאֵ֥ת הָאָֽרֶץ׃"),
    ("tanakh", "Genesis", "Genesis 1:2", "והארץ היתה תהו ובהו וחשך על פני תהום ורוח אלהים מרחפת על פני המים"),
    ("tanakh", "Genesis", "Genesis 1:3", "ויאמר אלהים יהי אור ויהי אור"),
    ("tanakh", "Genesis", "Genesis 1:4", "וירא אלהים את האור כי טוב ויבדל אלהים בין האור ובין החשך"),
    ("tanakh", "Genesis", "Genesis 1:10", "ויקרא אלהים ליבשה ארץ ולמקוה המים קרא ימים וירא אלהים כי טוב"),
    ("tanakh", "Leviticus", "Leviticus 19:18", "לא תקם ולא תטר את בני עמך ואהבת לרעך כמוך אני יהוה"),
    ("tanakh", "Deuteronomy", "Deuteronomy 6:4", "שמע ישראל יהוה אלהינו יהוה אחד"),
    ("tanakh", "Deuteronomy", "Deuteronomy 6:7",
     "ושננתם לבניך ודברת בם בשבתך בביתך ובלכתך בדרך ובשכבך ובקומך"),
    ("tanakh", "Isaiah", "Isaiah 2:5", "בית יעקב לכו ונלכה באור יהוה"),
    ("tanakh", "Isaiah", "Isaiah 60:1", "קומי אורי כי בא אורך וכבוד יהוה עליך זרח"),
    ("tanakh", "Psalms", "Psalms 119:105", "נר לרגלי דברך ואור לנתיבתי"),
    # Mishnah
    ("mishnah", "Berakhot", "Berakhot 1:1", "מאימתי קורין את שמע בערבית משעה שהכהנים נכנסים לאכול בתרומתן"),
    ("mishnah", "Berakhot", "Berakhot 1:3",
     "בית שמאי אומרים בערב כל אדם יטו ויקראו ובבקר יעמדו שנאמר ובשכבך ובקומך"),
    ("mishnah", "Berakhot", "Berakhot 3:1", "מי שמתו מוטל לפניו פטור מקריאת שמע"),
    ("mishnah", "Peah", "Peah 1:1",
     "אלו דברים שאין להם שיעור הפאה והבכורים והראיון וגמילות חסדים ותלמוד תורה"),
    ("mishnah", "Sotah", "Sotah 5:1", "רבי עקיבא אומר שנאמר ואהבת לרעך כמוך. זה כלל גדול בתורה"),
    ("mishnah", "Sotah", "Sotah 5:2", 'דרש רבי עקיבא "ושננתם לבניך ודברת בם" בשעה שאדם לומד תורה'),
    ("mishnah", "Sotah", "Sotah 5:3", "אמר רבי יהושע כתיב דברים שלא נכתבו בשום מקום."),
    ("mishnah", "Yevamot", "Yevamot 16:7", "אמר רבי עקיבא כשירדתי לנהרדעא לעבר שנה"),
    # Bavli
    ("bavli", "Berakhot", "Berakhot 2a:1", "תנא היכא קאי דקתני מאימתי"),
    ("bavli", "Shabbat", "Shabbat 31a:6", "דעלך סני לחברך לא תעביד זו היא כל התורה כולה"),
]


def fixture_segments():
    return [
        Segment(id=f"{t}:{ref}", type=t, work=work, ref=ref, normalized_ref=ref, source="fixture", text=text)
        for t, work, ref, text in FIXTURE_SEGMENTS
    ]


def _seed():
    with open_store(os.environ["SQLITE_PATH"]) as store:
        store.insert_segments(fixture_segments())
        build_qa_index(store, os.environ["QA_INDEX_PATH"])


_seed()


@pytest.fixture
def store():
    with open_store(os.environ["SQLITE_PATH"]) as s:
        yield s


@pytest.fixture
def registry(store):
    return WorkRegistry.from_store(store)


@pytest.fixture
def qa_index_path():
    return os.environ["QA_INDEX_PATH"]
