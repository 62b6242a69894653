"""Reference formatting: Hebrew numerals and Hebrew work names."""
from __future__ import annotations

import re

from kol_hatorah.taxonomy import display_work_name

ONES = {1: "א", 2: "ב", 3: "ג", 4: "ד", 5: "ה", 6: "ו", 7: "ז", 8: "ח", 9: "ט"}
TENS = {10: "י", 20: "כ", 30: "ל", 40: "מ", 50: "נ", 60: "ס", 70: "ע", 80: "פ", 90: "צ"}
HUNDREDS = {400: "ת", 300: "ש", 200: "ר", 100: "ק"}

GERESH = "׳"
GERSHAYIM = "״"

REF_RE = re.compile(r"^(.*?)\s+(\d+):(\d+)$")


def number_to_hebrew(num: int) -> str:
    """Hebrew numeral for ``num`` (e.g. 11 -> י״א, 15 -> ט״ו, 8 -> ח׳).

    Non-positive numbers are returned as plain digits.
    """
    if num <= 0:
        return str(num)
    n = num
    letters = ""
    for value, letter in HUNDREDS.items():
        while n >= value:
            letters += letter
            n -= value
    # 15 and 16 are written ט״ו / ט״ז to avoid spelling the divine name
    if n in (15, 16):
        letters += "ט" + ONES[n - 9]
        n = 0
    for value in sorted(TENS, reverse=True):
        if n >= value:
            letters += TENS[value]
            n -= value
            break
    if n > 0:
        letters += ONES[n]
    if len(letters) == 1:
        return letters + GERESH
    return letters[:-1] + GERSHAYIM + letters[-1]


def format_hebrew_ref(ref: str) -> str:
    """Rewrite the trailing ``chapter:verse`` of a reference in Hebrew numerals."""
    m = REF_RE.match(ref or "")
    if not m:
        return ref
    work, chapter, verse = m.group(1), int(m.group(2)), int(m.group(3))
    return f"{work} {number_to_hebrew(chapter)}:{number_to_hebrew(verse)}"


def format_ref(work: str | None, ref: str) -> str:
    """Show ``ref`` under the Hebrew name of ``work``.

    Canonical prefixes ("Genesis", "Mishnah Berakhot") are replaced; a reference
    that already starts with the Hebrew name is left as is.
    """
    if not work:
        return ref
    canon = work.strip()
    heb = display_work_name(canon)
    r = (ref or "").strip()
    for prefix in (f"Mishnah {canon}", f"Bavli {canon}", canon, heb):
        if r.startswith(prefix):
            r = r[len(prefix):].strip()
            break
    return f"{heb} {r}".strip()
