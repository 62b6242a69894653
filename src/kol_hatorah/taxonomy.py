"""Static corpus taxonomy: Hebrew names, canonical names and groupings.

Three collections are covered:
 - tanakh: 39 books, grouped into Torah / Nevi'im / Ketuvim
 - mishnah: 63 tractates, grouped into six sedarim
 - bavli: 37 tractates with Gemara

Canonical work names are the English identifiers used as the join key between
this module, the work registry and the lexical store. The Hebrew tables map every
accepted spelling to one canonical name; the first spelling listed for a work is
the one shown back to users unless CANONICAL_TO_HEB_OVERRIDE says otherwise.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional

COLLECTIONS = ("tanakh", "mishnah", "bavli")

TANAKH_CORPUS_KEYWORDS = frozenset({'תנ"ך', "תנך"})
SEDER_WORD = "סדר"

TANAKH_HEB_TO_CANONICAL: Dict[str, str] = {
    "בראשית": "Genesis",
    "שמות": "Exodus",
    "ויקרא": "Leviticus",
    "במדבר": "Numbers",
    "דברים": "Deuteronomy",
    "יהושע": "Joshua",
    "שופטים": "Judges",
    "שמואל א": "I Samuel",
    "שמואל ב": "II Samuel",
    "מלכים א": "I Kings",
    "מלכים ב": "II Kings",
    "ישעיה": "Isaiah",
    "ישעיהו": "Isaiah",
    "ירמיה": "Jeremiah",
    "ירמיהו": "Jeremiah",
    "יחזקאל": "Ezekiel",
    "הושע": "Hosea",
    "יואל": "Joel",
    "עמוס": "Amos",
    "עובדיה": "Obadiah",
    "יונה": "Jonah",
    "מיכה": "Micah",
    "נחום": "Nahum",
    "חבקוק": "Habakkuk",
    "צפניה": "Zephaniah",
    "חגי": "Haggai",
    "זכריה": "Zechariah",
    "מלאכי": "Malachi",
    "תהלים": "Psalms",
    "תהילים": "Psalms",
    "משלי": "Proverbs",
    "איוב": "Job",
    "שיר השירים": "Song of Songs",
    "רות": "Ruth",
    "איכה": "Lamentations",
    "קהלת": "Ecclesiastes",
    "אסתר": "Esther",
    "דניאל": "Daniel",
    "עזרא": "Ezra",
    "נחמיה": "Nehemiah",
    "דברי הימים א": "I Chronicles",
    "דברי הימים ב": "II Chronicles",
}

TANAKH_DIVISIONS: Dict[str, List[str]] = {
    "תורה": ["Genesis", "Exodus", "Leviticus", "Numbers", "Deuteronomy"],
    "נביאים": [
        "Joshua", "Judges", "I Samuel", "II Samuel", "I Kings", "II Kings",
        "Isaiah", "Jeremiah", "Ezekiel", "Hosea", "Joel", "Amos", "Obadiah",
        "Jonah", "Micah", "Nahum", "Habakkuk", "Zephaniah", "Haggai",
        "Zechariah", "Malachi",
    ],
    "כתובים": [
        "Psalms", "Proverbs", "Job", "Song of Songs", "Ruth", "Lamentations",
        "Ecclesiastes", "Esther", "Daniel", "Ezra", "Nehemiah",
        "I Chronicles", "II Chronicles",
    ],
}

MISHNAH_TRACTATES_HEB_TO_CANONICAL: Dict[str, str] = {
    "ברכות": "Berakhot",
    "פאה": "Peah",
    "דמאי": "Demai",
    "כלאים": "Kilayim",
    "שביעית": "Sheviit",
    "תרומות": "Terumot",
    "מעשרות": "Maasrot",
    "מעשר שני": "Maaser Sheni",
    "חלה": "Challah",
    "ערלה": "Orlah",
    "ביכורים": "Bikkurim",
    "בכורים": "Bikkurim",
    "שבת": "Shabbat",
    "עירובין": "Eruvin",
    "ערובין": "Eruvin",
    "פסחים": "Pesachim",
    "שקלים": "Shekalim",
    "יומא": "Yoma",
    "סוכה": "Sukkah",
    "ביצה": "Beitzah",
    "ראש השנה": "Rosh Hashanah",
    "תענית": "Taanit",
    "מגילה": "Megillah",
    "מועד קטן": "Moed Katan",
    "חגיגה": "Chagigah",
    "יבמות": "Yevamot",
    "כתובות": "Ketubot",
    "נדרים": "Nedarim",
    "נזיר": "Nazir",
    "סוטה": "Sotah",
    "גיטין": "Gittin",
    "קידושין": "Kiddushin",
    "קדושין": "Kiddushin",
    "בבא קמא": "Bava Kamma",
    "בבא מציעא": "Bava Metzia",
    "בבא בתרא": "Bava Batra",
    "סנהדרין": "Sanhedrin",
    "מכות": "Makkot",
    "שבועות": "Shevuot",
    "עדיות": "Eduyot",
    "עבודה זרה": "Avodah Zarah",
    "אבות": "Avot",
    "פרקי אבות": "Avot",
    "הוריות": "Horayot",
    "זבחים": "Zevachim",
    "מנחות": "Menachot",
    "חולין": "Chullin",
    "בכורות": "Bekhorot",
    "ערכין": "Arakhin",
    "תמורה": "Temurah",
    "כריתות": "Keritot",
    "מעילה": "Meilah",
    "תמיד": "Tamid",
    "מידות": "Middot",
    "מדות": "Middot",
    "קינים": "Kinnim",
    "כלים": "Kelim",
    "אהלות": "Oholot",
    "אוהלות": "Oholot",
    "נגעים": "Negaim",
    "פרה": "Parah",
    "טהרות": "Taharot",
    "מקואות": "Mikvaot",
    "נדה": "Niddah",
    "מכשירין": "Makhshirin",
    "זבים": "Zavim",
    "טבול יום": "Tevul Yom",
    "ידים": "Yadayim",
    "ידיים": "Yadayim",
    "עוקצין": "Oktzin",
}

SEDARIM: Dict[str, List[str]] = {
    "זרעים": [
        "Berakhot", "Peah", "Demai", "Kilayim", "Sheviit", "Terumot", "Maasrot",
        "Maaser Sheni", "Challah", "Orlah", "Bikkurim",
    ],
    "מועד": [
        "Shabbat", "Eruvin", "Pesachim", "Shekalim", "Yoma", "Sukkah", "Beitzah",
        "Rosh Hashanah", "Taanit", "Megillah", "Moed Katan", "Chagigah",
    ],
    "נשים": ["Yevamot", "Ketubot", "Nedarim", "Nazir", "Sotah", "Gittin", "Kiddushin"],
    "נזיקין": [
        "Bava Kamma", "Bava Metzia", "Bava Batra", "Sanhedrin", "Makkot", "Shevuot",
        "Eduyot", "Avodah Zarah", "Avot", "Horayot",
    ],
    "קדשים": [
        "Zevachim", "Menachot", "Chullin", "Bekhorot", "Arakhin", "Temurah",
        "Keritot", "Meilah", "Tamid", "Middot", "Kinnim",
    ],
    "טהרות": [
        "Kelim", "Oholot", "Negaim", "Parah", "Taharot", "Mikvaot", "Niddah",
        "Makhshirin", "Zavim", "Tevul Yom", "Yadayim", "Oktzin",
    ],
}

# Tractates with Bavli Gemara
BAVLI_TRACTATES_HEB_TO_CANONICAL: Dict[str, str] = {
    heb: canon
    for heb, canon in MISHNAH_TRACTATES_HEB_TO_CANONICAL.items()
    if canon in {
        "Berakhot", "Shabbat", "Eruvin", "Pesachim", "Rosh Hashanah", "Yoma",
        "Sukkah", "Beitzah", "Taanit", "Megillah", "Moed Katan", "Chagigah",
        "Yevamot", "Ketubot", "Nedarim", "Nazir", "Sotah", "Gittin", "Kiddushin",
        "Bava Kamma", "Bava Metzia", "Bava Batra", "Sanhedrin", "Makkot",
        "Shevuot", "Avodah Zarah", "Horayot", "Zevachim", "Menachot", "Chullin",
        "Bekhorot", "Arakhin", "Temurah", "Keritot", "Meilah", "Tamid", "Niddah",
    }
}

CANONICAL_TO_HEB_OVERRIDE: Dict[str, str] = {
    "Avot": "פרקי אבות",
    "Isaiah": "ישעיה",
    "Jeremiah": "ירמיה",
    "Psalms": "תהלים",
    "I Samuel": "שמואל א׳",
    "II Samuel": "שמואל ב׳",
    "I Kings": "מלכים א׳",
    "II Kings": "מלכים ב׳",
    "I Chronicles": "דברי הימים א׳",
    "II Chronicles": "דברי הימים ב׳",
}

HEB_TABLES: Dict[str, Dict[str, str]] = {
    "tanakh": TANAKH_HEB_TO_CANONICAL,
    "mishnah": MISHNAH_TRACTATES_HEB_TO_CANONICAL,
    "bavli": BAVLI_TRACTATES_HEB_TO_CANONICAL,
}

COLLECTION_PREFIX_RE = re.compile(r"^(Mishnah|Bavli)\s+", re.IGNORECASE)


def _invert(table: Dict[str, str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for heb, canon in table.items():
        out.setdefault(canon, heb)
    return out


CANONICAL_TO_HEB_TANAKH = _invert(TANAKH_HEB_TO_CANONICAL)
CANONICAL_TO_HEB_MISHNAH = _invert(MISHNAH_TRACTATES_HEB_TO_CANONICAL)
CANONICAL_TO_HEB_BAVLI = _invert(BAVLI_TRACTATES_HEB_TO_CANONICAL)


def lookup_hebrew_work(name: str) -> Optional[str]:
    """Canonical name for a Hebrew work name, checked across all collections."""
    for collection in COLLECTIONS:
        canon = HEB_TABLES[collection].get(name)
        if canon:
            return canon
    return None


def static_collections_of(work: str) -> List[str]:
    """Collections whose static tables list ``work``, in COLLECTIONS order."""
    found = []
    for collection in COLLECTIONS:
        if work in HEB_TABLES[collection].values():
            found.append(collection)
    return found


def is_tractate(work: str) -> bool:
    return any(c in ("mishnah", "bavli") for c in static_collections_of(work))


def display_work_name(canonical: str) -> str:
    """Hebrew display name for a canonical work, falling back to the canonical name."""
    base = COLLECTION_PREFIX_RE.sub("", canonical or "").strip()
    for table in (CANONICAL_TO_HEB_OVERRIDE, CANONICAL_TO_HEB_TANAKH, CANONICAL_TO_HEB_MISHNAH, CANONICAL_TO_HEB_BAVLI):
        if base in table:
            return table[base]
    return base or canonical
